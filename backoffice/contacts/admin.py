from django.contrib import admin
from .models import Contact


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ['contact_number', 'company_name', 'contact_type', 'organization_number', 'email', 'user', 'created_at']
    list_filter = ['contact_type', 'created_at']
    search_fields = ['contact_number', 'company_name', 'organization_number', 'personal_number', 'email']
    ordering = ['user', 'contact_number']
