import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.db.models import Count

from backoffice.core import sharing
from backoffice.core.errors import not_found_response
from backoffice.core.numbering import allocate_number, next_number, NumberAllocationError
from backoffice.core.permissions import PluginEnabled
from backoffice.core.utils import create_activity
from .filters import InvoiceFilter
from .models import Invoice, InvoiceShare
from .serializers import InvoiceSerializer, InvoiceShareSerializer

logger = logging.getLogger(__name__)

INVOICE_PREFIX = 'INV'


def _user_invoices(user):
    return Invoice.objects.filter(user=user).select_related('contact', 'estimate')


def _persist(request, invoice):
    """Save ``invoice``, allocating an invoice number first when it needs one"""
    if not invoice.needs_number:
        invoice.save()
        return invoice

    def save_with_number(number):
        invoice.invoice_number = number
        invoice.save()
        return invoice

    try:
        return allocate_number(
            Invoice.objects.filter(user=request.user), 'invoice_number', INVOICE_PREFIX, save_with_number
        )
    except NumberAllocationError:
        invoice.invoice_number = None
        raise


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, PluginEnabled('invoices')])
def invoice_list_create(request):
    """List the user's invoices (filterable) or create a new invoice"""
    if request.method == 'GET':
        queryset = _user_invoices(request.user).order_by('-created_at', '-id')
        filterset = InvoiceFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = InvoiceSerializer(filterset.qs, many=True)
        return Response(serializer.data)

    serializer = InvoiceSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    invoice = serializer.save(user=request.user)
    try:
        _persist(request, invoice)
    except NumberAllocationError as e:
        logger.error(f"Invoice number allocation failed for user {request.user.id}: {e}")
        return Response({'error': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_activity(
        request=request, activity_type='INVOICE_CREATED',
        description=f'Created invoice {invoice.invoice_number or "(draft)"} for {invoice.contact_name or "no contact"}',
        contact=invoice.contact, invoice=invoice
    )
    return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, PluginEnabled('invoices')])
def invoice_next_number(request):
    """Preview of the number the next sent invoice will get"""
    existing = Invoice.objects.filter(user=request.user).values_list('invoice_number', flat=True)
    return Response({'invoice_number': next_number(existing, INVOICE_PREFIX)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, PluginEnabled('invoices')])
def invoice_status_counts(request):
    """Number of invoices per status, e.g. {"draft": 3, "paid": 10}"""
    rows = (
        Invoice.objects.filter(user=request.user)
        .values('status')
        .annotate(count=Count('id'))
        .order_by()
    )
    return Response({row['status']: row['count'] for row in rows})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, PluginEnabled('invoices')])
def invoice_detail(request, pk):
    """Retrieve, update or delete an invoice"""
    invoice = _user_invoices(request.user).filter(pk=pk).first()
    if invoice is None:
        return not_found_response('Invoice')

    if request.method == 'GET':
        return Response(InvoiceSerializer(invoice).data)
    elif request.method in ('PUT', 'PATCH'):
        previous_status = invoice.status
        # Updates merge onto the stored invoice, so PUT is applied partially too
        serializer = InvoiceSerializer(invoice, data=request.data, partial=True, context={'request': request})
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        invoice = serializer.save()
        try:
            _persist(request, invoice)
        except NumberAllocationError as e:
            logger.error(f"Invoice number allocation failed for user {request.user.id}: {e}")
            return Response({'error': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        if invoice.status != previous_status:
            create_activity(
                request=request, activity_type='INVOICE_STATUS_CHANGED',
                description=f'Invoice {invoice.invoice_number or invoice.pk} changed from {previous_status} to {invoice.status}',
                contact=invoice.contact, invoice=invoice
            )
        else:
            create_activity(
                request=request, activity_type='INVOICE_UPDATED',
                description=f'Updated invoice {invoice.invoice_number or "(draft)"}',
                contact=invoice.contact, invoice=invoice
            )
        return Response(InvoiceSerializer(invoice).data)
    else:  # DELETE
        invoice_id = invoice.pk
        invoice_label = invoice.invoice_number or "(draft)"
        invoice.delete()
        create_activity(
            request=request, activity_type='INVOICE_DELETED',
            description=f'Deleted invoice {invoice_label}'
        )
        logger.info(f"Deleted invoice {invoice_id} for user {request.user.id}")
        return Response({'id': invoice_id})


# Sharing

@api_view(['POST'])
@permission_classes([IsAuthenticated, PluginEnabled('invoices')])
def invoice_share_create(request):
    return sharing.create_share(request, Invoice, InvoiceShare, 'invoice', 'Invoice', InvoiceShareSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated, PluginEnabled('invoices')])
def invoice_share_list(request, pk):
    return sharing.list_shares(request, Invoice, InvoiceShare, 'invoice', 'Invoice', InvoiceShareSerializer, pk)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, PluginEnabled('invoices')])
def invoice_share_revoke(request, share_id):
    return sharing.revoke_share(request, InvoiceShare, InvoiceShareSerializer, share_id)


@api_view(['GET'])
@permission_classes([AllowAny, PluginEnabled('invoices')])
def invoice_public(request, token):
    """Read-only view of a shared invoice; no login required"""
    return sharing.public_document(InvoiceShare, 'invoice', 'Invoice', InvoiceSerializer, token)
