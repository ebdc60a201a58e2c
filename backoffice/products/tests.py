"""
Test suite for Products module
Tests: input normalization, uniqueness conflicts, filters, list caching
"""
from decimal import Decimal
from unittest import mock

from django.core.cache import cache
from django.db import connection
from django.test import TestCase
from rest_framework import status

from backoffice.core.models import Activity
from backoffice.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backoffice.products.models import Product
from backoffice.products.serializers import normalize_input


class NormalizeInputTests(TestCase):
    def test_blank_text_becomes_none(self):
        cleaned = normalize_input({'sku': '  ', 'brand': '', 'gtin': ' 123 '})
        self.assertIsNone(cleaned['sku'])
        self.assertIsNone(cleaned['brand'])
        self.assertEqual(cleaned['gtin'], '123')

    def test_numbers_fall_back_to_defaults(self):
        cleaned = normalize_input({'quantity': 'abc', 'price_amount': '', 'vat_rate': None})
        self.assertEqual(cleaned['quantity'], 0)
        self.assertEqual(cleaned['price_amount'], Decimal('0'))
        self.assertEqual(cleaned['vat_rate'], Decimal('25'))

    def test_explicit_zero_vat_kept(self):
        self.assertEqual(normalize_input({'vat_rate': '0'})['vat_rate'], Decimal('0'))

    def test_currency_upper_cased(self):
        self.assertEqual(normalize_input({'currency': 'eur'})['currency'], 'EUR')
        self.assertEqual(normalize_input({'currency': ''})['currency'], 'SEK')
        self.assertEqual(normalize_input({'currency': 123})['currency'], 'SEK')
        self.assertEqual(normalize_input({'currency': None})['currency'], 'SEK')

    def test_non_list_images_reset(self):
        cleaned = normalize_input({'images': 'https://x/a.png', 'categories': None})
        self.assertEqual(cleaned['images'], [])
        self.assertEqual(cleaned['categories'], [])


class ProductAPITests(TestCase):
    """Test Product API endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_product(self):
        data = {
            'title': ' Hammer ',
            'sku': 'HAM-1',
            'price_amount': '199.50',
            'quantity': '4',
            'currency': 'sek',
            'categories': ['Tools'],
        }
        response = self.client.post('/api/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['title'], 'Hammer')
        self.assertEqual(response.data['quantity'], 4)
        self.assertEqual(response.data['currency'], 'SEK')
        self.assertEqual(Decimal(response.data['price_amount']), Decimal('199.50'))
        self.assertTrue(Activity.objects.filter(user=self.user, activity_type='PRODUCT_CREATED').exists())

    def test_title_required(self):
        response = self.client.post('/api/products/', {'title': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('title', response.data)

    def test_duplicate_sku_conflict(self):
        TestDataFactory.create_product(self.user, sku='DUP-1')
        response = self.client.post('/api/products/', {'title': 'Other', 'sku': 'DUP-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['errors'][0], {'field': 'sku', 'message': 'SKU "DUP-1" already exists'})

    def test_duplicate_product_number_conflict(self):
        TestDataFactory.create_product(self.user, product_number='P-100')
        response = self.client.post(
            '/api/products/', {'title': 'Other', 'product_number': 'P-100', 'sku': 'NEW-1'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['errors'][0]['message'], 'Product number "P-100" already exists')

    def test_blank_skus_do_not_conflict(self):
        TestDataFactory.create_product(self.user, sku='')
        response = self.client.post('/api/products/', {'title': 'No SKU', 'sku': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['sku'])

    def test_update_keeps_own_sku(self):
        product = TestDataFactory.create_product(self.user, sku='OWN-1')
        response = self.client.patch(f'/api/products/{product.id}/', {'quantity': 9}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 9)

    def test_numeric_currency_falls_back_to_default(self):
        response = self.client.post('/api/products/', {'title': 'Saw', 'currency': 123}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['currency'], 'SEK')

    def test_multipart_keeps_every_category(self):
        data = {'title': 'Rake', 'categories': ['Tools', 'Garden']}
        response = self.client.post('/api/products/', data, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['categories'], ['Tools', 'Garden'])

    def test_filter_by_status_and_category(self):
        TestDataFactory.create_product(self.user, title='Listed', categories=['Tools'])
        TestDataFactory.create_product(self.user, title='Hidden', status='draft', categories=['Tools'])
        TestDataFactory.create_product(self.user, title='Other', categories=['Garden'])

        response = self.client.get('/api/products/', {'status': 'for sale', 'category': 'Tools'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['title'] for p in response.data], ['Listed'])

    def test_category_filter_matches_whole_names(self):
        TestDataFactory.create_product(self.user, title='Spade', categories=['Garden', 'Tools'])
        TestDataFactory.create_product(self.user, title='Toolbox', categories=['Tool'])

        with mock.patch.object(connection.features, 'supports_json_field_contains', False):
            response = self.client.get('/api/products/', {'category': 'Tools'})
        self.assertEqual([p['title'] for p in response.data], ['Spade'])

    def test_list_invalidated_after_update(self):
        product = TestDataFactory.create_product(self.user, title='Before')
        self.client.get('/api/products/')
        product.title = 'After'
        product.save()
        response = self.client.get('/api/products/')
        self.assertEqual(response.data[0]['title'], 'After')

    def test_delete(self):
        product = TestDataFactory.create_product(self.user)
        response = self.client.delete(f'/api/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Product.objects.filter(pk=product.id).exists())

    def test_other_users_product_not_found(self):
        product = TestDataFactory.create_product(TestDataFactory.create_user())
        response = self.client.get(f'/api/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Product not found')
