from django.conf import settings
from django.db import models


class Contact(models.Model):
    """A customer or supplier: either a company or a private person"""
    TYPE_CHOICES = [
        ('company', 'Company'),
        ('private', 'Private Person'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='contacts')
    contact_number = models.CharField(max_length=50)
    contact_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='company')
    company_name = models.CharField(max_length=255, help_text="Company name, or full name for private persons")
    company_type = models.CharField(max_length=100, blank=True)
    organization_number = models.CharField(max_length=50, blank=True)
    vat_number = models.CharField(max_length=50, blank=True)
    personal_number = models.CharField(max_length=50, blank=True)
    contact_persons = models.JSONField(default=list, blank=True)
    addresses = models.JSONField(default=list, blank=True)
    email = models.CharField(max_length=254, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    phone2 = models.CharField(max_length=50, blank=True)
    website = models.CharField(max_length=255, blank=True)
    tax_rate = models.CharField(max_length=20, blank=True)
    payment_terms = models.CharField(max_length=50, blank=True)
    currency = models.CharField(max_length=3, blank=True)
    f_tax = models.CharField(max_length=20, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.contact_number} {self.company_name}"

    @property
    def is_company(self):
        return self.contact_type == 'company'

    class Meta:
        db_table = 'contacts'
        ordering = ['contact_number', 'id']
        constraints = [
            models.UniqueConstraint(fields=['user', 'contact_number'], name='unique_contact_number_per_user'),
        ]
        indexes = [
            models.Index(fields=['user', 'contact_type'], name='contacts_user_id_7c1a2e_idx'),
            models.Index(fields=['user', 'organization_number'], name='contacts_user_id_9b4d3f_idx'),
        ]
