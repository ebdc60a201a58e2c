from django.urls import path
from .views import (
    woo_settings, woo_test_connection, woo_export_products, woo_channel_status,
    woo_item_list_create, woo_item_detail,
)

urlpatterns = [
    path('', woo_item_list_create, name='woocommerce-item-list-create'),
    path('settings/', woo_settings, name='woocommerce-settings'),
    path('test/', woo_test_connection, name='woocommerce-test'),
    path('products/export/', woo_export_products, name='woocommerce-export'),
    path('products/status/', woo_channel_status, name='woocommerce-channel-status'),
    path('<int:pk>/', woo_item_detail, name='woocommerce-item-detail'),
]
