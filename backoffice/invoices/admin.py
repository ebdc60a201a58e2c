from django.contrib import admin
from .models import Invoice, InvoiceShare


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'invoice_type', 'contact_name', 'status', 'total', 'currency', 'issue_date', 'due_date', 'user']
    list_filter = ['status', 'invoice_type', 'currency', 'issue_date']
    search_fields = ['invoice_number', 'contact_name', 'organization_number']
    readonly_fields = [
        'subtotal', 'total_discount', 'subtotal_after_discount', 'invoice_discount_amount',
        'subtotal_after_invoice_discount', 'total_vat', 'total', 'status_changed_at', 'paid_at'
    ]
    ordering = ['-created_at']
    date_hierarchy = 'issue_date'


@admin.register(InvoiceShare)
class InvoiceShareAdmin(admin.ModelAdmin):
    list_display = ['invoice', 'share_token', 'valid_until', 'accessed_count', 'last_accessed_at', 'created_at']
    search_fields = ['share_token', 'invoice__invoice_number']
    ordering = ['-created_at']
