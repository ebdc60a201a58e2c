from django.utils import timezone
from rest_framework import serializers

from backoffice.contacts.models import Contact
from backoffice.core.serializers import LineItemSerializer
from .models import Estimate, EstimateShare, ACCEPTANCE_REASONS, REJECTION_REASONS

ACCEPTANCE_REASON_IDS = {key for key, _ in ACCEPTANCE_REASONS}
REJECTION_REASON_IDS = {key for key, _ in REJECTION_REASONS}


def _check_reasons(values, allowed, label):
    unknown = [v for v in values if v not in allowed]
    if unknown:
        raise serializers.ValidationError(f"Unknown {label} reason(s): {', '.join(unknown)}")
    return list(dict.fromkeys(values))


class EstimateSerializer(serializers.ModelSerializer):
    line_items = LineItemSerializer(many=True, required=False)
    contact = serializers.PrimaryKeyRelatedField(queryset=Contact.objects.none(), required=False, allow_null=True)
    acceptance_reasons = serializers.ListField(child=serializers.CharField(), required=False)
    rejection_reasons = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = Estimate
        fields = [
            'id', 'estimate_number', 'contact', 'contact_name', 'organization_number', 'currency',
            'line_items', 'estimate_discount', 'notes', 'valid_to',
            'subtotal', 'total_discount', 'estimate_discount_amount', 'total_vat', 'total',
            'status', 'acceptance_reasons', 'rejection_reasons', 'status_changed_at',
            'created_at', 'updated_at'
        ]
        read_only_fields = [
            'estimate_number', 'subtotal', 'total_discount', 'estimate_discount_amount',
            'total_vat', 'total', 'status_changed_at', 'created_at', 'updated_at'
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        request = self.context.get('request')
        if request is not None and request.user.is_authenticated:
            # Only the user's own contacts may be linked
            self.fields['contact'].queryset = Contact.objects.filter(user=request.user)

    def validate_currency(self, value):
        return (value or 'SEK').upper()

    def validate_estimate_discount(self, value):
        if value < 0 or value > 100:
            raise serializers.ValidationError('Discount must be between 0 and 100')
        return value

    def validate_acceptance_reasons(self, value):
        return _check_reasons(value, ACCEPTANCE_REASON_IDS, 'acceptance')

    def validate_rejection_reasons(self, value):
        return _check_reasons(value, REJECTION_REASON_IDS, 'rejection')

    def validate(self, attrs):
        contact = attrs.get('contact')
        if contact is not None:
            # Denormalized for display after the contact changes or is removed
            attrs.setdefault('contact_name', contact.company_name)
            attrs.setdefault('organization_number', contact.organization_number)
        return attrs

    def create(self, validated_data):
        """Build the estimate without saving; the view saves it once a number is allocated"""
        estimate = Estimate(**validated_data)
        estimate.status_changed_at = timezone.now()
        estimate.recalculate_totals()
        return estimate

    def update(self, instance, validated_data):
        new_status = validated_data.pop('status', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if new_status is not None:
            instance.set_status(new_status)
        instance.recalculate_totals()
        instance.save()
        return instance


class EstimateStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Estimate.STATUS_CHOICES)
    reasons = serializers.ListField(child=serializers.CharField(), required=False, default=list)

    def validate(self, attrs):
        status = attrs['status']
        reasons = attrs.get('reasons') or []
        if status == 'accepted':
            attrs['reasons'] = _check_reasons(reasons, ACCEPTANCE_REASON_IDS, 'acceptance')
        elif status == 'rejected':
            attrs['reasons'] = _check_reasons(reasons, REJECTION_REASON_IDS, 'rejection')
        elif reasons:
            raise serializers.ValidationError({'reasons': 'Reasons are only recorded for accepted or rejected estimates'})
        return attrs


class EstimateShareSerializer(serializers.ModelSerializer):
    class Meta:
        model = EstimateShare
        fields = ['id', 'estimate', 'share_token', 'valid_until', 'created_at', 'accessed_count', 'last_accessed_at']
        read_only_fields = fields
