from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Extended user model with additional fields"""
    phone = models.CharField(max_length=20, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'


class Setting(models.Model):
    """Application-wide key/value settings"""
    TYPE_CHOICES = [
        ('string', 'String'),
        ('json', 'JSON'),
        ('number', 'Number'),
        ('boolean', 'Boolean'),
    ]

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='string')
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'
        ordering = ['key']


class Activity(models.Model):
    """Activity feed entry for user-visible business events"""
    TYPE_CHOICES = [
        ('CONTACT_CREATED', 'Contact Created'),
        ('CONTACT_UPDATED', 'Contact Updated'),
        ('CONTACT_DELETED', 'Contact Deleted'),
        ('INVOICE_CREATED', 'Invoice Created'),
        ('INVOICE_UPDATED', 'Invoice Updated'),
        ('INVOICE_STATUS_CHANGED', 'Invoice Status Changed'),
        ('INVOICE_DELETED', 'Invoice Deleted'),
        ('ESTIMATE_CREATED', 'Estimate Created'),
        ('ESTIMATE_UPDATED', 'Estimate Updated'),
        ('ESTIMATE_STATUS_CHANGED', 'Estimate Status Changed'),
        ('PRODUCT_CREATED', 'Product Created'),
        ('PRODUCT_UPDATED', 'Product Updated'),
        ('PRODUCTS_EXPORTED', 'Products Exported'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, null=True, blank=True, related_name='activities')
    activity_type = models.CharField(max_length=50, choices=TYPE_CHOICES)
    description = models.TextField()
    contact = models.ForeignKey(
        'contacts.Contact', on_delete=models.SET_NULL, null=True, blank=True, related_name='activities'
    )
    invoice = models.ForeignKey(
        'invoices.Invoice', on_delete=models.SET_NULL, null=True, blank=True, related_name='activities'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.activity_type}: {self.description}"

    class Meta:
        db_table = 'activities'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='activities_user_created_idx'),
            models.Index(fields=['activity_type'], name='activities_type_idx'),
        ]
