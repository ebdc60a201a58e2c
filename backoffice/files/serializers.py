from rest_framework import serializers
from .models import FileItem


class FileItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = FileItem
        fields = ['id', 'name', 'size', 'mime_type', 'url', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Name is required')
        return value.strip()

    def validate_size(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError('Size cannot be negative')
        return value
