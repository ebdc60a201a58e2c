import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.cache import cache
from django.db import transaction, IntegrityError

from backoffice.core.errors import conflict_response, first_conflict, not_found_response
from backoffice.core.model_cache import get_product_list_cache_key, PRODUCT_LIST_CACHE_TTL
from backoffice.core.permissions import PluginEnabled
from backoffice.core.utils import create_activity
from .filters import ProductFilter
from .models import Product
from .serializers import ProductSerializer

logger = logging.getLogger(__name__)

CONFLICT_MESSAGES = {
    'product_number': 'Product number "{value}" already exists',
    'sku': 'SKU "{value}" already exists',
}


def _conflict_for(user, data, exclude_pk=None):
    conflict = first_conflict(
        Product, user,
        [('product_number', data.get('product_number'), None), ('sku', data.get('sku'), None)],
        exclude_pk=exclude_pk,
    )
    if conflict:
        field, value = conflict
        return conflict_response(field, CONFLICT_MESSAGES[field].format(value=value))
    return None


def _save_product(request, serializer, instance=None):
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    if instance is not None:
        data.setdefault('product_number', instance.product_number)
        data.setdefault('sku', instance.sku)

    conflict = _conflict_for(request.user, data, exclude_pk=instance.pk if instance else None)
    if conflict is not None:
        return conflict

    try:
        with transaction.atomic():
            if instance is None:
                product = serializer.save(user=request.user)
            else:
                product = serializer.save()
    except IntegrityError as e:
        # Lost a race with a concurrent insert
        logger.warning(f"Product unique violation for user {request.user.id}: {e}")
        field = 'sku' if 'sku' in str(e).lower() else 'product_number'
        return conflict_response(field, CONFLICT_MESSAGES[field].format(value=data.get(field)))

    created = instance is None
    create_activity(
        request=request,
        activity_type='PRODUCT_CREATED' if created else 'PRODUCT_UPDATED',
        description=f"{'Created' if created else 'Updated'} product: {product.title}",
    )
    return Response(
        ProductSerializer(product).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, PluginEnabled('products')])
def product_list_create(request):
    """List the user's products or create a new product"""
    if request.method == 'GET':
        filters = {key: request.query_params.get(key, '') for key in ('search', 'status', 'brand', 'category')}
        cache_key = get_product_list_cache_key(request.user.id, **filters)
        cached_data = cache.get(cache_key)
        if cached_data is not None:
            return Response(cached_data)

        queryset = Product.objects.filter(user=request.user)
        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        response_data = ProductSerializer(filterset.qs, many=True).data

        cache.set(cache_key, response_data, PRODUCT_LIST_CACHE_TTL)
        return Response(response_data)

    return _save_product(request, ProductSerializer(data=request.data))


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, PluginEnabled('products')])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = Product.objects.filter(pk=pk, user=request.user).first()
    if product is None:
        return not_found_response('Product')

    if request.method == 'GET':
        return Response(ProductSerializer(product).data)
    elif request.method == 'PUT':
        return _save_product(request, ProductSerializer(product, data=request.data), instance=product)
    elif request.method == 'PATCH':
        return _save_product(request, ProductSerializer(product, data=request.data, partial=True), instance=product)
    else:  # DELETE
        product_id = product.pk
        product.delete()
        logger.info(f"Deleted product {product_id} for user {request.user.id}")
        return Response({'id': product_id})
