from decimal import Decimal
from django.conf import settings
from django.db import models
from django.utils import timezone

from backoffice.core.sharing import ShareBase
from backoffice.core.totals import calculate_totals

ACCEPTANCE_REASONS = [
    ('competitive_price', 'Competitive price'),
    ('quality', 'Quality of offer'),
    ('delivery_time', 'Delivery time'),
    ('existing_relationship', 'Existing relationship'),
    ('scope_fit', 'Scope fits needs'),
    ('other', 'Other'),
]

REJECTION_REASONS = [
    ('price_too_high', 'Price too high'),
    ('chose_competitor', 'Chose a competitor'),
    ('timeline', 'Timeline did not work'),
    ('scope_mismatch', 'Scope did not match'),
    ('no_budget', 'No budget'),
    ('no_response', 'No response'),
    ('other', 'Other'),
]


class Estimate(models.Model):
    """A priced offer sent to a contact"""
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('accepted', 'Accepted'),
        ('rejected', 'Rejected'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='estimates')
    estimate_number = models.CharField(max_length=50)
    contact = models.ForeignKey(
        'contacts.Contact', on_delete=models.SET_NULL, null=True, blank=True, related_name='estimates'
    )
    contact_name = models.CharField(max_length=255, blank=True)
    organization_number = models.CharField(max_length=50, blank=True)
    currency = models.CharField(max_length=3, default='SEK')
    line_items = models.JSONField(default=list, blank=True)
    estimate_discount = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)
    valid_to = models.DateField(null=True, blank=True)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    estimate_discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_vat = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    acceptance_reasons = models.JSONField(default=list, blank=True)
    rejection_reasons = models.JSONField(default=list, blank=True)
    status_changed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.estimate_number

    def recalculate_totals(self):
        """Recompute stored totals from line items and the estimate discount"""
        totals = calculate_totals(self.line_items, self.estimate_discount)
        self.subtotal = totals['subtotal']
        self.total_discount = totals['total_discount']
        self.estimate_discount_amount = totals['document_discount_amount']
        self.total_vat = totals['total_vat']
        self.total = totals['total']

    def set_status(self, new_status):
        """Apply a status change; returns True when the status actually changed"""
        if new_status == self.status:
            return False
        self.status = new_status
        self.status_changed_at = timezone.now()
        return True

    class Meta:
        db_table = 'estimates'
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['user', 'estimate_number'], name='unique_estimate_number_per_user'),
        ]
        indexes = [
            models.Index(fields=['user', 'status'], name='estimates_user_status_idx'),
        ]


class EstimateShare(ShareBase):
    """Public, time-limited link to a single estimate"""
    estimate = models.ForeignKey(Estimate, on_delete=models.CASCADE, related_name='shares')

    class Meta(ShareBase.Meta):
        db_table = 'estimate_shares'
        indexes = [
            models.Index(fields=['valid_until'], name='estimate_shares_valid_idx'),
        ]
