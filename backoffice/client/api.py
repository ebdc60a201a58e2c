"""
Python clients for the back-office REST API.

One ``ApiClient`` holds the session, base URL and JWT token; each plugin
client wraps the endpoints of one plugin. Every call returns decoded JSON
with date fields parsed, or raises ``ApiError``.
"""
import logging
from datetime import date, datetime
from decimal import Decimal

import requests
from django.utils.dateparse import parse_date, parse_datetime

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

DATETIME_FIELDS = (
    'created_at', 'updated_at', 'paid_at', 'status_changed_at', 'valid_until',
    'share_valid_until', 'last_accessed_at', 'last_synced_at',
)
DATE_FIELDS = ('issue_date', 'due_date', 'valid_to')


class ApiError(Exception):
    """A failed API call. ``status`` is 0 when the server was not reached."""

    def __init__(self, message, status=None, errors=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.errors = errors or []

    @property
    def field_errors(self):
        """``errors`` entries that name a field, as returned with 409 responses"""
        return [e for e in self.errors if isinstance(e, dict) and e.get('field')]


def _normalize_record(record):
    for key in DATETIME_FIELDS:
        value = record.get(key)
        if isinstance(value, str):
            record[key] = parse_datetime(value) or value
    for key in DATE_FIELDS:
        value = record.get(key)
        if isinstance(value, str):
            record[key] = parse_date(value[:10]) or value
    return record


def normalize_dates(payload):
    """Parse known date and datetime fields in a record or list of records"""
    if isinstance(payload, list):
        return [normalize_dates(item) for item in payload]
    if isinstance(payload, dict):
        return _normalize_record(payload)
    return payload


def to_jsonable(value):
    """Render dates and Decimals the way the API expects them in JSON bodies"""
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def _error_message(response, payload):
    if isinstance(payload, dict):
        errors = payload.get('errors')
        if response.status_code == 409 and isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict) and first.get('message'):
                return first['message']
        for key in ('error', 'detail'):
            if payload.get(key):
                return str(payload[key])
    return response.reason or 'Request failed'


class ApiClient:
    """Session-backed access to ``{base_url}/api``"""

    def __init__(self, base_url, token=None, session=None, timeout=DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        if token:
            self.set_token(token)

    def set_token(self, token):
        self.session.headers.update({'Authorization': f'Bearer {token}'})

    def login(self, username, password):
        """Obtain a JWT pair and use its access token for later calls"""
        data = self._request('POST', '/auth/login/', json={'username': username, 'password': password})
        self.set_token(data['access'])
        return data

    def url(self, path):
        return f"{self.base_url}/api{path}"

    def _request(self, method, path, **kwargs):
        url = self.url(path)
        if 'json' in kwargs:
            kwargs['json'] = to_jsonable(kwargs['json'])
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise ApiError('Network unreachable', status=0) from e

        if not response.content:
            payload = {}
        else:
            try:
                payload = response.json()
            except ValueError:
                payload = {'raw': response.text}

        if not response.ok:
            errors = payload.get('errors') if isinstance(payload, dict) else None
            raise ApiError(_error_message(response, payload), status=response.status_code, errors=errors)

        return normalize_dates(payload)

    def get(self, path, **kwargs):
        return self._request('GET', path, **kwargs)

    def post(self, path, **kwargs):
        return self._request('POST', path, **kwargs)

    def put(self, path, **kwargs):
        return self._request('PUT', path, **kwargs)

    def delete(self, path, **kwargs):
        return self._request('DELETE', path, **kwargs)


class PluginApi:
    """CRUD over one plugin's collection"""
    prefix = ''

    def __init__(self, client):
        self.client = client

    def list(self, **filters):
        return self.client.get(f'{self.prefix}/', params=filters or None)

    def get(self, pk):
        return self.client.get(f'{self.prefix}/{pk}/')

    def create(self, data):
        return self.client.post(f'{self.prefix}/', json=data)

    def update(self, pk, data):
        return self.client.put(f'{self.prefix}/{pk}/', json=data)

    def delete(self, pk):
        return self.client.delete(f'{self.prefix}/{pk}/')


class ContactsApi(PluginApi):
    prefix = '/contacts'

    def next_number(self):
        return self.client.get(f'{self.prefix}/number/next/')['contact_number']


class ProductsApi(PluginApi):
    prefix = '/products'


class ShareMixin:
    document_field = ''

    def create_share(self, pk, valid_until):
        return self.client.post(
            f'{self.prefix}/shares/',
            json={self.document_field: pk, 'valid_until': valid_until},
        )

    def shares(self, pk):
        return self.client.get(f'{self.prefix}/{pk}/shares/')

    def revoke_share(self, share_id):
        return self.client.delete(f'{self.prefix}/shares/{share_id}/')

    def public(self, token):
        return self.client.get(f'{self.prefix}/public/{token}/')


class EstimatesApi(ShareMixin, PluginApi):
    prefix = '/estimates'
    document_field = 'estimate'

    def next_number(self):
        return self.client.get(f'{self.prefix}/next-number/')['estimate_number']

    def change_status(self, pk, status, reasons=None):
        return self.client.post(f'{self.prefix}/{pk}/status/', json={'status': status, 'reasons': reasons or []})

    def convert_to_invoice(self, pk):
        return self.client.post(f'{self.prefix}/{pk}/convert-to-invoice/')


class InvoicesApi(ShareMixin, PluginApi):
    prefix = '/invoices'
    document_field = 'invoice'

    def next_number(self):
        return self.client.get(f'{self.prefix}/number/next/')['invoice_number']

    def status_counts(self):
        return self.client.get(f'{self.prefix}/status-counts/')


class FilesApi(PluginApi):
    prefix = '/files'

    def upload(self, files):
        """Upload ``files``, an iterable of ``(name, fileobj, mime_type)``"""
        parts = [('files', (name, fileobj, mime_type)) for name, fileobj, mime_type in files]
        return self.client.post(f'{self.prefix}/upload/', files=parts)

    def download(self, url):
        """Raw bytes of a stored file, given its ``/api/files/raw/...`` url"""
        path = url[len('/api'):] if url.startswith('/api/') else url
        try:
            response = self.client.session.get(self.client.url(path), timeout=self.client.timeout)
        except requests.exceptions.RequestException as e:
            raise ApiError('Network unreachable', status=0) from e
        if not response.ok:
            raise ApiError(response.reason or 'Request failed', status=response.status_code)
        return response.content


class WooCommerceApi(PluginApi):
    prefix = '/woocommerce-products'

    def get_settings(self):
        return self.client.get(f'{self.prefix}/settings/')

    def save_settings(self, data):
        return self.client.put(f'{self.prefix}/settings/', json=data)

    def test_connection(self, credentials=None):
        return self.client.post(f'{self.prefix}/test/', json=credentials or {})

    def export_products(self, product_ids):
        return self.client.post(f'{self.prefix}/products/export/', json={'products': list(product_ids)})


class ActivitiesApi:
    def __init__(self, client):
        self.client = client

    def recent(self, limit=10):
        return self.client.get('/activities/', params={'limit': limit})

    def clear(self):
        return self.client.delete('/activities/')
