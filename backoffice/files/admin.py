from django.contrib import admin
from .models import FileItem


@admin.register(FileItem)
class FileItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'mime_type', 'size', 'user', 'updated_at']
    list_filter = ['mime_type', 'created_at']
    search_fields = ['name', 'stored_name']
    readonly_fields = ['stored_name', 'created_at', 'updated_at']
    ordering = ['-updated_at']
