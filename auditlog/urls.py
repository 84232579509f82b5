from django.urls import path
from . import views

app_name = "auditlog"

urlpatterns = [
    path("records/", views.record_list_view, name="record_list"),
    path("records/<uuid:audit_id>/", views.record_detail_view, name="record_detail"),
    path("subjects/<str:subject_type>/<str:subject_id>/", views.subject_history_view, name="subject_history"),
    path("stats/", views.stats_view, name="stats"),
    path("export/", views.export_csv_view, name="export_csv"),
]
