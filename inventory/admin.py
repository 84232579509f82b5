from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "tenant", "unit_price", "active", "updated_at")
    list_filter = ("active", "tenant")
    search_fields = ("sku", "name")
