from decimal import Decimal
from rest_framework import serializers

from backoffice.core.totals import to_decimal
from .models import Product

NULLABLE_TEXT_FIELDS = ('product_number', 'sku', 'description', 'main_image', 'brand', 'gtin')


def normalize_input(data):
    """
    Clean raw product input: blank strings become None, non-numeric
    quantity/price/VAT fall back to their defaults, currency is upper-cased
    (SEK when blank or not text) and list fields default to empty lists.
    """
    cleaned = dict(data)
    for field in NULLABLE_TEXT_FIELDS:
        value = cleaned.get(field)
        if isinstance(value, str) and not value.strip():
            cleaned[field] = None
        elif isinstance(value, str):
            cleaned[field] = value.strip()

    if 'quantity' in cleaned:
        try:
            cleaned['quantity'] = int(to_decimal(cleaned['quantity'], Decimal('0')))
        except (ValueError, ArithmeticError):
            cleaned['quantity'] = 0
    if 'price_amount' in cleaned:
        cleaned['price_amount'] = to_decimal(cleaned['price_amount'], Decimal('0'))
    if 'vat_rate' in cleaned:
        cleaned['vat_rate'] = to_decimal(cleaned['vat_rate'], Decimal('25'))
    if 'currency' in cleaned:
        currency = cleaned['currency']
        cleaned['currency'] = currency.strip().upper() if isinstance(currency, str) and currency.strip() else 'SEK'
    for field in ('images', 'categories'):
        if field in cleaned and not isinstance(cleaned[field], list):
            cleaned[field] = []
    return cleaned


class ProductSerializer(serializers.ModelSerializer):
    images = serializers.ListField(child=serializers.CharField(), required=False)
    categories = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = Product
        fields = [
            'id', 'product_number', 'sku', 'title', 'description', 'status',
            'quantity', 'price_amount', 'currency', 'vat_rate',
            'main_image', 'images', 'categories', 'brand', 'gtin',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def to_internal_value(self, data):
        if hasattr(data, 'getlist'):
            # Form data repeats list fields once per value
            lists = {field: data.getlist(field) for field in ('images', 'categories') if field in data}
            data = {**data.dict(), **lists}
        return super().to_internal_value(normalize_input(data))

    def validate_title(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError('Title is required')
        return value.strip()
