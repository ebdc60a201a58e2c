"""
Batch export of products to WooCommerce and bookkeeping of the outcome.
"""
import logging

from django.db import transaction
from django.utils import timezone

from .client import WooCommerceClient, map_product_to_woo, parse_body
from .models import ChannelProductMap, ChannelErrorLog, WOOCOMMERCE_CHANNEL

logger = logging.getLogger(__name__)


class ExportResult:
    def __init__(self, ok, status_code, summary, raw):
        self.ok = ok
        self.status_code = status_code
        self.summary = summary
        self.raw = raw


def _collect_successes(body):
    """Map SKU -> WooCommerce id for every created or updated product in the response"""
    successes = {}
    if not isinstance(body, dict):
        return successes
    for key in ('create', 'update'):
        for item in body.get(key) or []:
            if not isinstance(item, dict):
                continue
            sku = str(item.get('sku') or '').strip()
            # Per-item failures come back as {"id": 0, "error": {...}}
            if sku and item.get('id') and not item.get('error'):
                successes[sku] = item['id']
    return successes


def _error_message(body):
    messages = []
    if isinstance(body, dict):
        for error in body.get('errors') or []:
            if isinstance(error, dict) and error.get('message'):
                messages.append(error['message'])
        if not messages and body.get('message'):
            messages.append(body['message'])
    return '; '.join(messages) or None


def _item_errors(body):
    """Per-SKU error messages reported inside create/update arrays"""
    errors = {}
    if not isinstance(body, dict):
        return errors
    for key in ('create', 'update'):
        for item in body.get(key) or []:
            if isinstance(item, dict) and isinstance(item.get('error'), dict):
                sku = str(item.get('sku') or '').strip()
                if sku:
                    errors[sku] = item['error'].get('message')
    return errors


def export_products(user, products, woo_settings, client=None):
    """
    Send ``products`` to the store in one batch request and record per
    product whether it arrived. Raises WooCommerceError when the store
    cannot be reached.
    """
    client = client or WooCommerceClient.from_settings(woo_settings)
    payloads = [map_product_to_woo(p) for p in products]
    response = client.batch_create(payloads)
    body = parse_body(response)

    successes = _collect_successes(body)
    item_errors = _item_errors(body)
    general_error = _error_message(body)
    now = timezone.now()
    items = []

    with transaction.atomic():
        for product, payload in zip(products, payloads):
            sku = (product.sku or '').strip()
            external_id = successes.get(sku) if sku else None
            if external_id is not None:
                ChannelProductMap.objects.update_or_create(
                    user=user, product=product, channel=WOOCOMMERCE_CHANNEL,
                    defaults={
                        'external_id': str(external_id),
                        'last_synced_at': now,
                        'last_sync_status': 'success',
                        'last_error': None,
                    }
                )
                items.append({'product_id': product.pk, 'sku': sku, 'status': 'success', 'external_id': external_id})
                continue

            message = item_errors.get(sku) or general_error or ('Product has no SKU' if not sku else 'Export failed')
            ChannelProductMap.objects.update_or_create(
                user=user, product=product, channel=WOOCOMMERCE_CHANNEL,
                defaults={
                    'external_id': None,
                    'last_synced_at': now,
                    'last_sync_status': 'error',
                    'last_error': message,
                }
            )
            ChannelErrorLog.objects.create(
                user=user,
                channel=WOOCOMMERCE_CHANNEL,
                product=product,
                payload=payload,
                response=body if isinstance(body, dict) else {'raw': body},
                error_message=message,
            )
            items.append({'product_id': product.pk, 'sku': sku, 'status': 'error', 'error': message})

    success_count = sum(1 for i in items if i['status'] == 'success')
    summary = {
        'ok': response.ok,
        'endpoint': client.endpoint('/products/batch'),
        'counts': {
            'requested': len(products),
            'success': success_count,
            'error': len(items) - success_count,
        },
        'items': items,
    }
    logger.info(
        f"WooCommerce export for user {user.id}: {summary['counts']['success']}/{len(products)} succeeded "
        f"(HTTP {response.status_code})"
    )
    return ExportResult(response.ok, response.status_code, summary, body)
