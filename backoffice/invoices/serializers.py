from django.utils import timezone
from rest_framework import serializers

from backoffice.contacts.models import Contact
from backoffice.core.serializers import LineItemSerializer
from backoffice.estimates.models import Estimate
from .models import Invoice, InvoiceShare


class InvoiceSerializer(serializers.ModelSerializer):
    line_items = LineItemSerializer(many=True, required=False)
    contact = serializers.PrimaryKeyRelatedField(queryset=Contact.objects.none(), required=False, allow_null=True)
    estimate = serializers.PrimaryKeyRelatedField(queryset=Estimate.objects.none(), required=False, allow_null=True)
    estimate_number = serializers.CharField(source='estimate.estimate_number', read_only=True, default=None)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'invoice_type', 'contact', 'contact_name', 'organization_number',
            'currency', 'line_items', 'invoice_discount', 'notes', 'payment_terms',
            'issue_date', 'due_date',
            'subtotal', 'total_discount', 'subtotal_after_discount', 'invoice_discount_amount',
            'subtotal_after_invoice_discount', 'total_vat', 'total',
            'status', 'status_changed_at', 'paid_at', 'estimate', 'estimate_number',
            'created_at', 'updated_at'
        ]
        read_only_fields = [
            'invoice_number', 'subtotal', 'total_discount', 'subtotal_after_discount',
            'invoice_discount_amount', 'subtotal_after_invoice_discount', 'total_vat', 'total',
            'status_changed_at', 'paid_at', 'created_at', 'updated_at'
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        request = self.context.get('request')
        if request is not None and request.user.is_authenticated:
            self.fields['contact'].queryset = Contact.objects.filter(user=request.user)
            self.fields['estimate'].queryset = Estimate.objects.filter(user=request.user)

    def validate_currency(self, value):
        return (value or 'SEK').upper()

    def validate_invoice_discount(self, value):
        if value < 0 or value > 100:
            raise serializers.ValidationError('Discount must be between 0 and 100')
        return value

    def validate(self, attrs):
        issue_date = attrs.get('issue_date', getattr(self.instance, 'issue_date', None))
        due_date = attrs.get('due_date', getattr(self.instance, 'due_date', None))
        if issue_date and due_date and due_date < issue_date:
            raise serializers.ValidationError({'due_date': 'Due date cannot be before issue date'})
        contact = attrs.get('contact')
        if contact is not None:
            attrs.setdefault('contact_name', contact.company_name)
            attrs.setdefault('organization_number', contact.organization_number)
        return attrs

    def create(self, validated_data):
        """Build the invoice without saving; the view decides on numbering and saves"""
        new_status = validated_data.pop('status', 'draft')
        invoice = Invoice(**validated_data)
        invoice.apply_status(new_status)
        invoice.status_changed_at = timezone.now()
        invoice.recalculate_totals()
        return invoice

    def update(self, instance, validated_data):
        """Merge onto the stored invoice and recompute totals; the view saves"""
        new_status = validated_data.pop('status', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if new_status is not None:
            instance.apply_status(new_status)
        instance.recalculate_totals()
        return instance


class InvoiceShareSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceShare
        fields = ['id', 'invoice', 'share_token', 'valid_until', 'created_at', 'accessed_count', 'last_accessed_at']
        read_only_fields = fields
