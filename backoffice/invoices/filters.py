import django_filters
from django.db.models import Q
from .models import Invoice


class InvoiceFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Invoice.STATUS_CHOICES)
    invoice_type = django_filters.ChoiceFilter(choices=Invoice.TYPE_CHOICES)
    contact = django_filters.NumberFilter(field_name='contact_id')
    date_from = django_filters.DateFilter(field_name='issue_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='issue_date', lookup_expr='lte')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Invoice
        fields = ['status', 'invoice_type', 'contact']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(invoice_number__icontains=value) |
            Q(contact_name__icontains=value) |
            Q(organization_number__icontains=value)
        )
