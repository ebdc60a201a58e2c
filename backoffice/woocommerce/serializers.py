from rest_framework import serializers
from .models import WooCommerceSettings, ChannelProductMap


MASK_PREFIX = '****'


class WooCommerceSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = WooCommerceSettings
        fields = ['id', 'store_url', 'consumer_key', 'consumer_secret', 'use_query_auth', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def to_representation(self, instance):
        data = super().to_representation(instance)
        secret = data.get('consumer_secret') or ''
        # Only the tail of the secret leaves the server
        data['consumer_secret'] = f"{MASK_PREFIX}{secret[-4:]}" if secret else ''
        return data

    def validate(self, attrs):
        secret = (attrs.get('consumer_secret') or '').strip()
        if not secret or secret.startswith(MASK_PREFIX):
            # A masked or empty secret keeps the stored one
            attrs.pop('consumer_secret', None)
            if self.instance is None:
                raise serializers.ValidationError({'consumer_secret': 'Consumer secret is required'})
        return attrs

    def validate_store_url(self, value):
        value = value.strip().rstrip('/')
        if not value.startswith(('http://', 'https://')):
            raise serializers.ValidationError('Store URL must start with http:// or https://')
        return value


class ConnectionTestSerializer(serializers.Serializer):
    store_url = serializers.CharField(required=False, allow_blank=True, default='')
    consumer_key = serializers.CharField(required=False, allow_blank=True, default='')
    consumer_secret = serializers.CharField(required=False, allow_blank=True, default='')
    use_query_auth = serializers.BooleanField(required=False, default=False)


class ChannelProductMapSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChannelProductMap
        fields = ['id', 'product', 'channel', 'enabled', 'external_id', 'last_synced_at', 'last_sync_status', 'last_error']
        read_only_fields = fields
