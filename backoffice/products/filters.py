import django_filters
from django.db import connections
from django.db.models import Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search')
    status = django_filters.ChoiceFilter(choices=Product.STATUS_CHOICES)
    brand = django_filters.CharFilter(field_name='brand', lookup_expr='iexact')
    category = django_filters.CharFilter(method='filter_category')

    class Meta:
        model = Product
        fields = ['status', 'brand']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(title__icontains=value) |
            Q(product_number__icontains=value) |
            Q(sku__icontains=value) |
            Q(gtin__icontains=value)
        )

    def filter_category(self, queryset, name, value):
        """Categories are a JSON list; keep products listing the exact category"""
        value = value.strip()
        if not value:
            return queryset
        if connections[queryset.db].features.supports_json_field_contains:
            return queryset.filter(categories__contains=[value])
        # SQLite has no JSON containment lookup
        matching_ids = [p.id for p in queryset.only('id', 'categories') if value in (p.categories or [])]
        return queryset.filter(id__in=matching_ids)
