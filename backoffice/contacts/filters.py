import django_filters
from django.db.models import Q
from .models import Contact


class ContactFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search')
    contact_type = django_filters.ChoiceFilter(choices=Contact.TYPE_CHOICES)

    class Meta:
        model = Contact
        fields = ['contact_type']

    def filter_search(self, queryset, name, value):
        """Match name, number, organization number, email or phone"""
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(company_name__icontains=value) |
            Q(contact_number__icontains=value) |
            Q(organization_number__icontains=value) |
            Q(email__icontains=value) |
            Q(phone__icontains=value)
        )
