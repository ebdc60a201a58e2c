from decimal import Decimal
from django.conf import settings
from django.db import models
from django.db.models import F


class Product(models.Model):
    """A sellable product in the user's catalog"""
    STATUS_CHOICES = [
        ('for sale', 'For Sale'),
        ('draft', 'Draft'),
        ('archived', 'Archived'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='products')
    product_number = models.CharField(max_length=100, blank=True, null=True)
    sku = models.CharField(max_length=100, blank=True, null=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='for sale')
    quantity = models.IntegerField(default=0)
    price_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default='SEK')
    vat_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('25.00'))
    main_image = models.CharField(max_length=500, blank=True, null=True)
    images = models.JSONField(default=list, blank=True)
    categories = models.JSONField(default=list, blank=True)
    brand = models.CharField(max_length=255, blank=True, null=True)
    gtin = models.CharField(max_length=50, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'products'
        ordering = [F('product_number').asc(nulls_last=True), 'id']
        constraints = [
            models.UniqueConstraint(fields=['user', 'product_number'], name='unique_product_number_per_user'),
            models.UniqueConstraint(fields=['user', 'sku'], name='unique_product_sku_per_user'),
        ]
        indexes = [
            models.Index(fields=['user', 'status'], name='products_user_status_idx'),
        ]
