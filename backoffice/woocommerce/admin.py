from django.contrib import admin
from .models import WooCommerceSettings, ChannelProductMap, ChannelErrorLog


@admin.register(WooCommerceSettings)
class WooCommerceSettingsAdmin(admin.ModelAdmin):
    list_display = ['user', 'store_url', 'use_query_auth', 'updated_at']
    search_fields = ['store_url', 'user__username']
    exclude = ['consumer_secret']


@admin.register(ChannelProductMap)
class ChannelProductMapAdmin(admin.ModelAdmin):
    list_display = ['product', 'channel', 'external_id', 'last_sync_status', 'last_synced_at', 'user']
    list_filter = ['channel', 'last_sync_status', 'enabled']
    search_fields = ['product__title', 'product__sku', 'external_id']


@admin.register(ChannelErrorLog)
class ChannelErrorLogAdmin(admin.ModelAdmin):
    list_display = ['channel', 'product', 'error_message', 'user', 'created_at']
    list_filter = ['channel', 'created_at']
    readonly_fields = ['payload', 'response', 'created_at']
