from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, Setting, Activity
from .totals import calculate_line_item


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'is_active', 'is_staff', 'created_at', 'updated_at']
        read_only_fields = ['is_active', 'is_staff', 'created_at', 'updated_at']


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone']

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        user = User.objects.create(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ['id', 'key', 'value', 'type', 'description', 'created_at', 'updated_at']
        read_only_fields = ['key', 'created_at', 'updated_at']


class ActivitySerializer(serializers.ModelSerializer):
    contact_name = serializers.CharField(source='contact.company_name', read_only=True, default=None)
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True, default=None)

    class Meta:
        model = Activity
        fields = ['id', 'activity_type', 'description', 'user', 'contact', 'contact_name', 'invoice', 'invoice_number', 'created_at']


class LineItemSerializer(serializers.Serializer):
    """One line of an invoice or estimate, stored inside the document's JSON"""
    id = serializers.CharField(required=False, allow_blank=True)
    product = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    unit = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, default=0)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, default=0)
    discount = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, default=0)
    vat_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, default=25)
    line_subtotal = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    discount_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    line_subtotal_after_discount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    vat_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    def to_internal_value(self, data):
        validated = super().to_internal_value(data)
        calculated = calculate_line_item(validated)
        # JSON storage: decimals are kept as strings, the way the API renders them
        return {key: str(value) if key not in ('id', 'product', 'description', 'unit') else value
                for key, value in calculated.items()}
