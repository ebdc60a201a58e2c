import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from backoffice.core.errors import not_found_response
from backoffice.core.permissions import PluginEnabled
from backoffice.core.utils import create_activity
from backoffice.products.models import Product
from .client import WooCommerceClient, WooCommerceError, parse_body
from .export import export_products
from .models import WooCommerceSettings, ChannelProductMap
from .serializers import WooCommerceSettingsSerializer, ConnectionTestSerializer, ChannelProductMapSerializer

logger = logging.getLogger(__name__)

PLUGIN = 'woocommerce-products'


def _upsert_settings(request):
    existing = WooCommerceSettings.objects.filter(user=request.user).first()
    serializer = WooCommerceSettingsSerializer(existing, data=request.data, partial=existing is not None)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer.save(user=request.user)
    return Response(serializer.data)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, PluginEnabled(PLUGIN)])
def woo_settings(request):
    """Read or save (upsert) the user's WooCommerce credentials"""
    if request.method == 'GET':
        existing = WooCommerceSettings.objects.filter(user=request.user).first()
        return Response(WooCommerceSettingsSerializer(existing).data if existing else None)
    return _upsert_settings(request)


@api_view(['POST'])
@permission_classes([IsAuthenticated, PluginEnabled(PLUGIN)])
def woo_test_connection(request):
    """
    Call the store's API root with the given credentials, or the saved
    ones when the body has no store_url.
    """
    serializer = ConnectionTestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    if data['store_url'].strip():
        client = WooCommerceClient(
            data['store_url'], data['consumer_key'].strip(), data['consumer_secret'].strip(),
            use_query_auth=data['use_query_auth'],
        )
        complete = bool(data['consumer_key'].strip() and data['consumer_secret'].strip())
    else:
        saved = WooCommerceSettings.objects.filter(user=request.user).first()
        complete = saved is not None and saved.is_complete
        client = WooCommerceClient.from_settings(saved) if complete else None

    if not complete:
        return Response(
            {'error': 'Missing WooCommerce credentials (store_url, consumer_key, consumer_secret).'},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        response = client.test_connection()
    except WooCommerceError as e:
        return Response(
            {'error': 'Failed to reach WooCommerce API', 'detail': str(e)},
            status=status.HTTP_502_BAD_GATEWAY
        )

    return Response({
        'ok': response.ok,
        'status': response.status_code,
        'status_text': response.reason,
        'endpoint': client.endpoint(),
        'body': parse_body(response),
    })


def _resolve_products(user, entries):
    """
    Turn the request's product list (ids or objects with an ``id``) into the
    user's Products, preserving order. Returns (products, missing_ids).
    """
    ids = []
    for entry in entries:
        raw_id = entry.get('id') if isinstance(entry, dict) else entry
        try:
            ids.append(int(raw_id))
        except (TypeError, ValueError):
            ids.append(None)
    found = Product.objects.filter(user=user, pk__in=[i for i in ids if i is not None]).in_bulk()
    missing = [i for i in ids if i not in found]
    return [found[i] for i in ids if i in found], missing


@api_view(['POST'])
@permission_classes([IsAuthenticated, PluginEnabled(PLUGIN)])
def woo_export_products(request):
    """Export products to WooCommerce in one batch and report the per-product outcome"""
    woo = WooCommerceSettings.objects.filter(user=request.user).first()
    if woo is None:
        return Response(
            {'error': 'WooCommerce settings not found. Save settings first.'},
            status=status.HTTP_400_BAD_REQUEST
        )

    entries = request.data.get('products') if hasattr(request.data, 'get') else None
    if not isinstance(entries, list) or not entries:
        return Response(
            {'error': 'Request must include a non-empty products list.'},
            status=status.HTTP_400_BAD_REQUEST
        )

    products, missing = _resolve_products(request.user, entries)
    if missing:
        return Response(
            {'error': f"Unknown product id(s): {', '.join(str(m) for m in missing)}"},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        result = export_products(request.user, products, woo)
    except WooCommerceError as e:
        return Response(
            {'error': 'Export to WooCommerce failed', 'detail': str(e)},
            status=status.HTTP_502_BAD_GATEWAY
        )

    create_activity(
        request=request, activity_type='PRODUCTS_EXPORTED',
        description=(
            f"Exported {result.summary['counts']['success']} of "
            f"{result.summary['counts']['requested']} product(s) to WooCommerce"
        ),
    )

    if not result.ok:
        return Response(
            {'error': 'WooCommerce batch export failed', **result.summary, 'raw': result.raw},
            status=result.status_code
        )
    return Response(result.summary)


@api_view(['GET'])
@permission_classes([IsAuthenticated, PluginEnabled(PLUGIN)])
def woo_channel_status(request):
    """Sync state of the user's products on WooCommerce"""
    maps = ChannelProductMap.objects.filter(user=request.user).order_by('product_id')
    return Response(ChannelProductMapSerializer(maps, many=True).data)


# Settings as a plain collection, for clients that treat every plugin alike

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, PluginEnabled(PLUGIN)])
def woo_item_list_create(request):
    if request.method == 'GET':
        items = WooCommerceSettings.objects.filter(user=request.user)
        return Response(WooCommerceSettingsSerializer(items, many=True).data)
    response = _upsert_settings(request)
    if response.status_code == status.HTTP_200_OK:
        response.status_code = status.HTTP_201_CREATED
    return response


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, PluginEnabled(PLUGIN)])
def woo_item_detail(request, pk):
    item = WooCommerceSettings.objects.filter(pk=pk, user=request.user).first()
    if item is None:
        return not_found_response('Item')
    if request.method == 'PUT':
        serializer = WooCommerceSettingsSerializer(item, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        return Response(serializer.data)
    item.delete()
    return Response({'message': 'Item deleted successfully', 'id': pk})
