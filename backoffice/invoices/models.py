from datetime import timedelta
from decimal import Decimal
from django.conf import settings
from django.db import models
from django.utils import timezone

from backoffice.core.sharing import ShareBase
from backoffice.core.totals import calculate_totals

DEFAULT_PAYMENT_DAYS = 30


def default_due_date():
    return timezone.localdate() + timedelta(days=DEFAULT_PAYMENT_DAYS)


class Invoice(models.Model):
    """
    A customer invoice.

    Drafts have no invoice number; one is allocated the first time the
    invoice is sent. Stored totals are always derived from ``line_items``
    and ``invoice_discount``.
    """
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('paid', 'Paid'),
        ('overdue', 'Overdue'),
        ('canceled', 'Canceled'),
    ]
    TYPE_CHOICES = [
        ('invoice', 'Invoice'),
        ('credit_note', 'Credit Note'),
        ('cash_invoice', 'Cash Invoice'),
        ('receipt', 'Receipt'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='invoices')
    invoice_number = models.CharField(max_length=50, blank=True, null=True)
    invoice_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='invoice')
    contact = models.ForeignKey(
        'contacts.Contact', on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices'
    )
    contact_name = models.CharField(max_length=255, blank=True)
    organization_number = models.CharField(max_length=50, blank=True)
    currency = models.CharField(max_length=3, default='SEK')
    line_items = models.JSONField(default=list, blank=True)
    invoice_discount = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)
    payment_terms = models.CharField(max_length=50, blank=True, default=str(DEFAULT_PAYMENT_DAYS))
    issue_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(default=default_due_date)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    subtotal_after_discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    invoice_discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    subtotal_after_invoice_discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_vat = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    status_changed_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    estimate = models.ForeignKey(
        'estimates.Estimate', on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.invoice_number or f"Draft-{self.pk}"

    def recalculate_totals(self):
        totals = calculate_totals(self.line_items, self.invoice_discount)
        self.subtotal = totals['subtotal']
        self.total_discount = totals['total_discount']
        self.subtotal_after_discount = totals['subtotal_after_discount']
        self.invoice_discount_amount = totals['document_discount_amount']
        self.subtotal_after_invoice_discount = totals['subtotal_after_document_discount']
        self.total_vat = totals['total_vat']
        self.total = totals['total']

    def apply_status(self, new_status):
        """
        Apply a status transition: stamps ``status_changed_at``, sets
        ``paid_at`` when becoming paid and clears it when leaving paid.
        Returns True when the status changed.
        """
        if new_status == self.status:
            return False
        now = timezone.now()
        if new_status == 'paid':
            self.paid_at = now
        elif self.status == 'paid':
            self.paid_at = None
        self.status = new_status
        self.status_changed_at = now
        return True

    @property
    def needs_number(self):
        return not self.invoice_number and self.status not in ('draft', 'canceled')

    @property
    def is_overdue(self):
        return self.status == 'overdue' or (
            self.status == 'sent' and self.due_date is not None and self.due_date < timezone.localdate()
        )

    class Meta:
        db_table = 'invoices'
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['user', 'invoice_number'], name='unique_invoice_number_per_user'),
        ]
        indexes = [
            models.Index(fields=['user', 'status'], name='invoices_user_status_idx'),
            models.Index(fields=['user', 'issue_date'], name='invoices_user_issue_idx'),
            models.Index(fields=['due_date'], name='invoices_due_date_idx'),
        ]


class InvoiceShare(ShareBase):
    """Public, time-limited link to a single invoice"""
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='shares')

    class Meta(ShareBase.Meta):
        db_table = 'invoice_shares'
        indexes = [
            models.Index(fields=['valid_until'], name='invoice_shares_valid_idx'),
        ]
