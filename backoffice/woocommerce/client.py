"""
WooCommerce REST API client (wc/v3) and product payload mapping.
"""
import logging

import requests
from django.conf import settings as django_settings

logger = logging.getLogger(__name__)

API_PATH = '/wp-json/wc/v3'
DEFAULT_TIMEOUT = 30


class WooCommerceError(Exception):
    """The store could not be reached (DNS, TLS, timeout, connection refused)"""


def normalize_base_url(url):
    return str(url or '').strip().rstrip('/')


def map_status_to_woo(status):
    status = str(status or '').lower()
    if status in ('for sale', 'active', 'publish'):
        return 'publish'
    if status == 'draft':
        return 'draft'
    if status in ('archived', 'private'):
        return 'private'
    return 'draft'


def map_product_to_woo(product):
    """Build the WooCommerce product payload for a Product"""
    images = []
    if product.main_image:
        images.append({'src': product.main_image})
    for src in product.images or []:
        if src:
            images.append({'src': src})

    payload = {
        'sku': product.sku,
        'name': product.title or '',
        'status': map_status_to_woo(product.status),
        'manage_stock': True,
        'description': product.description or '',
    }
    if product.price_amount is not None:
        payload['regular_price'] = str(product.price_amount)
    if product.quantity is not None:
        payload['stock_quantity'] = int(product.quantity)
    if images:
        payload['images'] = images
    if product.brand:
        payload['attributes'] = [{'name': 'brand', 'options': [str(product.brand)]}]
    return payload


def parse_body(response):
    """Decode a JSON body; non-JSON bodies are wrapped as {'raw': text}"""
    try:
        return response.json()
    except ValueError:
        return {'raw': response.text}


class WooCommerceClient:
    """Thin wrapper that signs requests the way the store expects"""

    def __init__(self, store_url, consumer_key, consumer_secret, use_query_auth=False, session=None, timeout=None):
        self.base_url = normalize_base_url(store_url)
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.use_query_auth = use_query_auth
        self.session = session or requests.Session()
        self.timeout = timeout or getattr(django_settings, 'WOOCOMMERCE_TIMEOUT', DEFAULT_TIMEOUT)

    @classmethod
    def from_settings(cls, woo_settings, **kwargs):
        return cls(
            woo_settings.store_url,
            woo_settings.consumer_key,
            woo_settings.consumer_secret,
            use_query_auth=woo_settings.use_query_auth,
            **kwargs
        )

    def endpoint(self, path=''):
        return f"{self.base_url}{API_PATH}{path}"

    def request(self, method, path='', **kwargs):
        url = self.endpoint(path)
        if self.use_query_auth:
            params = dict(kwargs.pop('params', None) or {})
            params.update({'consumer_key': self.consumer_key, 'consumer_secret': self.consumer_secret})
            kwargs['params'] = params
        else:
            kwargs['auth'] = (self.consumer_key, self.consumer_secret)
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"WooCommerce request failed: {method} {url}: {e}")
            raise WooCommerceError(str(e)) from e

    def test_connection(self):
        return self.request('GET')

    def batch_create(self, payloads):
        return self.request('POST', '/products/batch', json={'create': payloads})
