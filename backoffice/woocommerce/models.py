from django.conf import settings
from django.db import models

WOOCOMMERCE_CHANNEL = 'woocommerce'


class WooCommerceSettings(models.Model):
    """Per-user WooCommerce REST API credentials"""
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='woocommerce_settings')
    store_url = models.CharField(max_length=500)
    consumer_key = models.CharField(max_length=255)
    consumer_secret = models.CharField(max_length=255)
    use_query_auth = models.BooleanField(default=False, help_text="Send credentials as query parameters instead of Basic auth")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user} -> {self.store_url}"

    @property
    def is_complete(self):
        return bool(self.store_url and self.consumer_key and self.consumer_secret)

    class Meta:
        db_table = 'woocommerce_settings'
        verbose_name_plural = 'WooCommerce settings'


class ChannelProductMap(models.Model):
    """Sync state of one product on one sales channel"""
    SYNC_STATUS_CHOICES = [
        ('success', 'Success'),
        ('error', 'Error'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='channel_product_maps')
    product = models.ForeignKey('products.Product', on_delete=models.CASCADE, related_name='channel_maps')
    channel = models.CharField(max_length=50, default=WOOCOMMERCE_CHANNEL)
    enabled = models.BooleanField(default=True)
    external_id = models.CharField(max_length=100, blank=True, null=True)
    last_synced_at = models.DateTimeField(null=True, blank=True)
    last_sync_status = models.CharField(max_length=20, choices=SYNC_STATUS_CHOICES, blank=True, null=True)
    last_error = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product_id}@{self.channel}: {self.last_sync_status}"

    class Meta:
        db_table = 'channel_product_map'
        constraints = [
            models.UniqueConstraint(fields=['user', 'product', 'channel'], name='unique_channel_product_per_user'),
        ]


class ChannelErrorLog(models.Model):
    """Failed export attempt, kept with the request and response for troubleshooting"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='channel_errors')
    channel = models.CharField(max_length=50, default=WOOCOMMERCE_CHANNEL)
    product = models.ForeignKey('products.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='channel_errors')
    payload = models.JSONField(default=dict, blank=True)
    response = models.JSONField(default=dict, blank=True)
    error_message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'channel_error_log'
        ordering = ['-created_at']
