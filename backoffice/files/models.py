from django.conf import settings
from django.db import models

RAW_URL_PREFIX = '/api/files/raw/'


class FileItem(models.Model):
    """Metadata of an uploaded (or externally hosted) file"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='files')
    name = models.CharField(max_length=255, help_text="Original filename, shown and used for downloads")
    size = models.BigIntegerField(null=True, blank=True)
    mime_type = models.CharField(max_length=255, blank=True, null=True)
    url = models.CharField(max_length=1000, blank=True, null=True)
    stored_name = models.CharField(max_length=255, blank=True, null=True, help_text="Filename on disk for uploads")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'user_files'
        ordering = ['-updated_at', '-id']
        indexes = [
            models.Index(fields=['user', 'stored_name'], name='user_files_stored_idx'),
        ]
