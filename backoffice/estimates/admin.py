from django.contrib import admin
from .models import Estimate, EstimateShare


@admin.register(Estimate)
class EstimateAdmin(admin.ModelAdmin):
    list_display = ['estimate_number', 'contact_name', 'status', 'total', 'currency', 'valid_to', 'user', 'created_at']
    list_filter = ['status', 'currency', 'created_at']
    search_fields = ['estimate_number', 'contact_name', 'organization_number']
    readonly_fields = ['subtotal', 'total_discount', 'estimate_discount_amount', 'total_vat', 'total', 'status_changed_at']
    ordering = ['-created_at']


@admin.register(EstimateShare)
class EstimateShareAdmin(admin.ModelAdmin):
    list_display = ['estimate', 'share_token', 'valid_until', 'accessed_count', 'last_accessed_at', 'created_at']
    search_fields = ['share_token', 'estimate__estimate_number']
    ordering = ['-created_at']
