"""
Test suite for WooCommerce module
Tests: payload mapping, connection test, batch export bookkeeping
"""
from decimal import Decimal
from unittest import mock

import requests
from django.test import TestCase
from rest_framework import status

from backoffice.core.models import Activity
from backoffice.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backoffice.woocommerce.client import WooCommerceClient, map_product_to_woo, map_status_to_woo
from backoffice.woocommerce.models import ChannelProductMap, ChannelErrorLog, WooCommerceSettings


def fake_response(status_code=200, body=None, reason='OK'):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = reason
    response.json.return_value = body if body is not None else {}
    response.text = ''
    return response


class PayloadMappingTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_status_mapping(self):
        self.assertEqual(map_status_to_woo('for sale'), 'publish')
        self.assertEqual(map_status_to_woo('active'), 'publish')
        self.assertEqual(map_status_to_woo('draft'), 'draft')
        self.assertEqual(map_status_to_woo('archived'), 'private')
        self.assertEqual(map_status_to_woo('something'), 'draft')

    def test_product_payload(self):
        product = TestDataFactory.create_product(
            self.user, title='Hammer', sku='HAM-1', price_amount=Decimal('199.00'), quantity=3,
            main_image='https://img/main.jpg', images=['https://img/2.jpg'], brand='Acme',
        )
        payload = map_product_to_woo(product)
        self.assertEqual(payload['sku'], 'HAM-1')
        self.assertEqual(payload['name'], 'Hammer')
        self.assertEqual(payload['status'], 'publish')
        self.assertEqual(payload['regular_price'], '199.00')
        self.assertEqual(payload['stock_quantity'], 3)
        self.assertTrue(payload['manage_stock'])
        self.assertEqual(payload['images'], [{'src': 'https://img/main.jpg'}, {'src': 'https://img/2.jpg'}])
        self.assertEqual(payload['attributes'], [{'name': 'brand', 'options': ['Acme']}])

    def test_query_auth_sends_credentials_as_params(self):
        session = mock.Mock()
        session.request.return_value = fake_response()
        client = WooCommerceClient('https://shop.example.com/', 'ck', 'cs', use_query_auth=True, session=session)
        client.test_connection()
        args, kwargs = session.request.call_args
        self.assertEqual(args, ('GET', 'https://shop.example.com/wp-json/wc/v3'))
        self.assertEqual(kwargs['params'], {'consumer_key': 'ck', 'consumer_secret': 'cs'})
        self.assertNotIn('auth', kwargs)


class WooCommerceAPITests(TestCase):
    """Test WooCommerce plugin endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_save_settings_upserts(self):
        data = {'store_url': 'https://shop.example.com/', 'consumer_key': 'ck_1', 'consumer_secret': 'cs_secret1'}
        first = self.client.put('/api/woocommerce-products/settings/', data, format='json')
        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data['store_url'], 'https://shop.example.com')
        self.assertEqual(first.data['consumer_secret'], '****ret1')

        second = self.client.put('/api/woocommerce-products/settings/', {'consumer_key': 'ck_2'}, format='json')
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(WooCommerceSettings.objects.filter(user=self.user).count(), 1)
        self.assertEqual(WooCommerceSettings.objects.get(user=self.user).consumer_key, 'ck_2')

    def test_saving_fetched_settings_keeps_secret(self):
        data = {'store_url': 'https://shop.example.com', 'consumer_key': 'ck_1', 'consumer_secret': 'cs_realsecret1234'}
        self.client.put('/api/woocommerce-products/settings/', data, format='json')

        fetched = dict(self.client.get('/api/woocommerce-products/settings/').data)
        self.assertEqual(fetched['consumer_secret'], '****1234')
        fetched['use_query_auth'] = True
        response = self.client.put('/api/woocommerce-products/settings/', fetched, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        saved = WooCommerceSettings.objects.get(user=self.user)
        self.assertEqual(saved.consumer_secret, 'cs_realsecret1234')
        self.assertTrue(saved.use_query_auth)

    def test_first_save_requires_real_secret(self):
        data = {'store_url': 'https://shop.example.com', 'consumer_key': 'ck_1', 'consumer_secret': '****1234'}
        response = self.client.put('/api/woocommerce-products/settings/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('consumer_secret', response.data)
        self.assertFalse(WooCommerceSettings.objects.filter(user=self.user).exists())

    def test_connection_without_credentials(self):
        response = self.client.post('/api/woocommerce-products/test/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data['error'], 'Missing WooCommerce credentials (store_url, consumer_key, consumer_secret).'
        )

    @mock.patch('requests.Session.request')
    def test_connection_with_saved_settings(self, mock_request):
        TestDataFactory.create_woocommerce_settings(self.user)
        mock_request.return_value = fake_response(body={'namespace': 'wc/v3'})
        response = self.client.post('/api/woocommerce-products/test/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['ok'])
        self.assertEqual(response.data['endpoint'], 'https://shop.example.com/wp-json/wc/v3')
        self.assertEqual(response.data['body'], {'namespace': 'wc/v3'})

    @mock.patch('requests.Session.request')
    def test_connection_network_error(self, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError('refused')
        response = self.client.post(
            '/api/woocommerce-products/test/',
            {'store_url': 'https://down.example.com', 'consumer_key': 'ck', 'consumer_secret': 'cs'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['error'], 'Failed to reach WooCommerce API')

    def test_export_requires_settings(self):
        product = TestDataFactory.create_product(self.user)
        response = self.client.post(
            '/api/woocommerce-products/products/export/', {'products': [product.id]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'WooCommerce settings not found. Save settings first.')

    def test_export_requires_products(self):
        TestDataFactory.create_woocommerce_settings(self.user)
        response = self.client.post('/api/woocommerce-products/products/export/', {'products': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_export_rejects_foreign_products(self):
        TestDataFactory.create_woocommerce_settings(self.user)
        foreign = TestDataFactory.create_product(TestDataFactory.create_user())
        response = self.client.post(
            '/api/woocommerce-products/products/export/', {'products': [foreign.id]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @mock.patch('requests.Session.request')
    def test_export_records_success_and_failure(self, mock_request):
        TestDataFactory.create_woocommerce_settings(self.user)
        good = TestDataFactory.create_product(self.user, sku='GOOD-1')
        bad = TestDataFactory.create_product(self.user, sku='BAD-1')
        mock_request.return_value = fake_response(body={
            'create': [
                {'id': 501, 'sku': 'GOOD-1'},
                {'id': 0, 'sku': 'BAD-1', 'error': {'code': 'invalid', 'message': 'Invalid SKU'}},
            ]
        })

        response = self.client.post(
            '/api/woocommerce-products/products/export/', {'products': [good.id, {'id': bad.id}]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counts'], {'requested': 2, 'success': 1, 'error': 1})
        self.assertEqual(response.data['endpoint'], 'https://shop.example.com/wp-json/wc/v3/products/batch')

        args, kwargs = mock_request.call_args
        self.assertEqual(args[0], 'POST')
        self.assertEqual([p['sku'] for p in kwargs['json']['create']], ['GOOD-1', 'BAD-1'])
        self.assertEqual(kwargs['auth'], ('ck_test', 'cs_test'))

        good_map = ChannelProductMap.objects.get(product=good)
        self.assertEqual(good_map.last_sync_status, 'success')
        self.assertEqual(good_map.external_id, '501')
        bad_map = ChannelProductMap.objects.get(product=bad)
        self.assertEqual(bad_map.last_sync_status, 'error')
        self.assertEqual(bad_map.last_error, 'Invalid SKU')
        self.assertEqual(ChannelErrorLog.objects.filter(product=bad).count(), 1)
        self.assertTrue(Activity.objects.filter(user=self.user, activity_type='PRODUCTS_EXPORTED').exists())

    @mock.patch('requests.Session.request')
    def test_export_upstream_failure_passes_status(self, mock_request):
        TestDataFactory.create_woocommerce_settings(self.user)
        product = TestDataFactory.create_product(self.user, sku='X-1')
        mock_request.return_value = fake_response(
            status_code=401, reason='Unauthorized',
            body={'code': 'woocommerce_rest_cannot_create', 'message': 'Sorry, you are not allowed'},
        )
        response = self.client.post(
            '/api/woocommerce-products/products/export/', {'products': [product.id]}, format='json'
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['error'], 'WooCommerce batch export failed')
        self.assertEqual(response.data['counts']['error'], 1)
        self.assertEqual(
            ChannelProductMap.objects.get(product=product).last_error, 'Sorry, you are not allowed'
        )

    def test_plugin_can_be_disabled(self):
        with self.settings(BACKOFFICE_PLUGINS=['contacts']):
            response = self.client.get('/api/woocommerce-products/settings/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
