"""
Test utilities and factories for creating test data
"""
from datetime import timedelta
from decimal import Decimal
import random
import string

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from backoffice.core.totals import calculate_line_item
from backoffice.contacts.models import Contact
from backoffice.products.models import Product
from backoffice.estimates.models import Estimate, EstimateShare
from backoffice.invoices.models import Invoice, InvoiceShare
from backoffice.files.models import FileItem
from backoffice.woocommerce.models import WooCommerceSettings

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_contact(user, contact_number=None, company_name=None, contact_type='company', **fields):
        """Create a test contact"""
        if not contact_number:
            contact_number = TestDataFactory.random_string(6)
        if not company_name:
            company_name = f'Company_{TestDataFactory.random_string(6)}'
        return Contact.objects.create(
            user=user,
            contact_number=contact_number,
            company_name=company_name,
            contact_type=contact_type,
            **fields
        )

    @staticmethod
    def create_product(user, title=None, sku=None, product_number=None, price_amount=None, **fields):
        """Create a test product"""
        if not title:
            title = f'Product_{TestDataFactory.random_string(6)}'
        if sku is None:
            sku = f'SKU_{TestDataFactory.random_string(8)}'
        return Product.objects.create(
            user=user,
            title=title,
            sku=sku,
            product_number=product_number,
            price_amount=price_amount if price_amount is not None else Decimal('100.00'),
            **fields
        )

    @staticmethod
    def line_item(quantity='1', unit_price='100.00', discount='0', vat_rate='25', description='Item'):
        """A line item dict as stored on invoices and estimates"""
        item = calculate_line_item({
            'description': description,
            'quantity': quantity,
            'unit_price': unit_price,
            'discount': discount,
            'vat_rate': vat_rate,
        })
        return {key: str(value) if isinstance(value, Decimal) else value for key, value in item.items()}

    @staticmethod
    def create_estimate(user, estimate_number=None, contact=None, status='draft', line_items=None, **fields):
        """Create a test estimate with totals derived from its line items"""
        if not estimate_number:
            estimate_number = f'{timezone.localdate().year}-{random.randint(100, 999)}'
        estimate = Estimate(
            user=user,
            estimate_number=estimate_number,
            contact=contact,
            contact_name=contact.company_name if contact else '',
            status=status,
            line_items=line_items if line_items is not None else [TestDataFactory.line_item()],
            **fields
        )
        estimate.recalculate_totals()
        estimate.save()
        return estimate

    @staticmethod
    def create_invoice(user, invoice_number=None, contact=None, status='draft', line_items=None, **fields):
        """Create a test invoice with totals derived from its line items"""
        invoice = Invoice(
            user=user,
            invoice_number=invoice_number,
            contact=contact,
            contact_name=contact.company_name if contact else '',
            status=status,
            line_items=line_items if line_items is not None else [TestDataFactory.line_item()],
            **fields
        )
        if status == 'paid':
            invoice.paid_at = timezone.now()
        invoice.recalculate_totals()
        invoice.save()
        return invoice

    @staticmethod
    def create_invoice_share(invoice, valid_until=None):
        return InvoiceShare.objects.create(
            user=invoice.user,
            invoice=invoice,
            valid_until=valid_until or timezone.now() + timedelta(days=7),
        )

    @staticmethod
    def create_estimate_share(estimate, valid_until=None):
        return EstimateShare.objects.create(
            user=estimate.user,
            estimate=estimate,
            valid_until=valid_until or timezone.now() + timedelta(days=7),
        )

    @staticmethod
    def create_file_item(user, name=None, **fields):
        """Create file metadata without a stored file"""
        if not name:
            name = f'file_{TestDataFactory.random_string(6)}.pdf'
        fields.setdefault('url', f'https://cdn.example.com/{name}')
        return FileItem.objects.create(user=user, name=name, **fields)

    @staticmethod
    def create_woocommerce_settings(user, store_url='https://shop.example.com', use_query_auth=False):
        return WooCommerceSettings.objects.create(
            user=user,
            store_url=store_url,
            consumer_key='ck_test',
            consumer_secret='cs_test',
            use_query_auth=use_query_auth,
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
