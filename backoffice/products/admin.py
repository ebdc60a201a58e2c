from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['title', 'product_number', 'sku', 'status', 'quantity', 'price_amount', 'currency', 'user', 'updated_at']
    list_filter = ['status', 'currency', 'created_at']
    search_fields = ['title', 'product_number', 'sku', 'gtin', 'brand']
    ordering = ['user', 'product_number']
