from rest_framework import serializers
from .models import Contact


class ContactSerializer(serializers.ModelSerializer):
    contact_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    company_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    contact_persons = serializers.ListField(child=serializers.DictField(), required=False)
    addresses = serializers.ListField(child=serializers.DictField(), required=False)

    class Meta:
        model = Contact
        fields = [
            'id', 'contact_number', 'contact_type', 'company_name', 'company_type',
            'organization_number', 'vat_number', 'personal_number',
            'contact_persons', 'addresses', 'email', 'phone', 'phone2', 'website',
            'tax_rate', 'payment_terms', 'currency', 'f_tax', 'notes',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        contact_type = attrs.get('contact_type', getattr(self.instance, 'contact_type', 'company'))
        if 'company_name' in attrs or self.instance is None:
            name = (attrs.get('company_name') or '').strip()
            if not name:
                message = 'Company name is required' if contact_type == 'company' else 'Full name is required'
                raise serializers.ValidationError({'company_name': message})
            attrs['company_name'] = name
        for field in ('contact_number', 'organization_number', 'personal_number', 'email'):
            if isinstance(attrs.get(field), str):
                attrs[field] = attrs[field].strip()
        return attrs
