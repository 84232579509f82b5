from django.urls import path
from . import views

app_name = "inventory"

urlpatterns = [
    path("products/", views.product_collection_view, name="product_list"),
    path("products/<uuid:product_id>/", views.product_detail_view, name="product_detail"),
]
