import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.db import transaction

from backoffice.core import sharing
from backoffice.core.errors import not_found_response
from backoffice.core.numbering import allocate_number, next_number, NumberAllocationError
from backoffice.core.permissions import PluginEnabled
from backoffice.core.utils import create_activity
from .models import Estimate, EstimateShare
from .serializers import EstimateSerializer, EstimateStatusSerializer, EstimateShareSerializer

logger = logging.getLogger(__name__)

# Estimate numbers have no letter prefix: 2025-001
ESTIMATE_PREFIX = ''


def _user_estimates(user):
    return Estimate.objects.filter(user=user).select_related('contact')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, PluginEnabled('estimates')])
def estimate_list_create(request):
    """List the user's estimates or create a new estimate"""
    if request.method == 'GET':
        queryset = _user_estimates(request.user).order_by('-created_at', '-id')
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        serializer = EstimateSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = EstimateSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    estimate = serializer.save(user=request.user)

    def persist(number):
        estimate.estimate_number = number
        estimate.save()
        return estimate

    try:
        allocate_number(Estimate.objects.filter(user=request.user), 'estimate_number', ESTIMATE_PREFIX, persist)
    except NumberAllocationError as e:
        logger.error(f"Estimate number allocation failed for user {request.user.id}: {e}")
        return Response({'error': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_activity(
        request=request, activity_type='ESTIMATE_CREATED',
        description=f'Created estimate {estimate.estimate_number}', contact=estimate.contact
    )
    return Response(EstimateSerializer(estimate).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, PluginEnabled('estimates')])
def estimate_next_number(request):
    """Preview of the number the next estimate will get"""
    existing = Estimate.objects.filter(user=request.user).values_list('estimate_number', flat=True)
    return Response({'estimate_number': next_number(existing, ESTIMATE_PREFIX)})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, PluginEnabled('estimates')])
def estimate_detail(request, pk):
    """Retrieve, update or delete an estimate"""
    estimate = _user_estimates(request.user).filter(pk=pk).first()
    if estimate is None:
        return not_found_response('Estimate')

    if request.method == 'GET':
        return Response(EstimateSerializer(estimate).data)
    elif request.method in ('PUT', 'PATCH'):
        previous_status = estimate.status
        serializer = EstimateSerializer(
            estimate, data=request.data, partial=request.method == 'PATCH', context={'request': request}
        )
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        estimate = serializer.save()
        if estimate.status != previous_status:
            create_activity(
                request=request, activity_type='ESTIMATE_STATUS_CHANGED',
                description=f'Estimate {estimate.estimate_number} marked as {estimate.status}',
                contact=estimate.contact
            )
        else:
            create_activity(
                request=request, activity_type='ESTIMATE_UPDATED',
                description=f'Updated estimate {estimate.estimate_number}', contact=estimate.contact
            )
        return Response(EstimateSerializer(estimate).data)
    else:  # DELETE
        estimate_id = estimate.pk
        estimate.delete()
        return Response({'id': estimate_id})


@api_view(['POST'])
@permission_classes([IsAuthenticated, PluginEnabled('estimates')])
def estimate_change_status(request, pk):
    """
    Move an estimate to a new status.

    Accepted and rejected estimates record the reasons given; the reasons
    for the other outcome are left untouched.
    """
    estimate = _user_estimates(request.user).filter(pk=pk).first()
    if estimate is None:
        return not_found_response('Estimate')

    serializer = EstimateStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    new_status = serializer.validated_data['status']
    reasons = serializer.validated_data['reasons']
    if new_status == 'accepted':
        estimate.acceptance_reasons = reasons
    elif new_status == 'rejected':
        estimate.rejection_reasons = reasons

    changed = estimate.set_status(new_status)
    estimate.save()
    if changed:
        create_activity(
            request=request, activity_type='ESTIMATE_STATUS_CHANGED',
            description=f'Estimate {estimate.estimate_number} marked as {new_status}',
            contact=estimate.contact
        )
    return Response(EstimateSerializer(estimate).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, PluginEnabled('estimates'), PluginEnabled('invoices')])
def estimate_convert_to_invoice(request, pk):
    """Create a draft invoice carrying over the estimate's contact and lines"""
    from backoffice.invoices.models import Invoice

    estimate = _user_estimates(request.user).filter(pk=pk).first()
    if estimate is None:
        return not_found_response('Estimate')

    with transaction.atomic():
        invoice = Invoice(
            user=request.user,
            estimate=estimate,
            contact=estimate.contact,
            contact_name=estimate.contact_name,
            organization_number=estimate.organization_number,
            currency=estimate.currency,
            line_items=estimate.line_items,
            invoice_discount=estimate.estimate_discount,
            notes=estimate.notes,
        )
        invoice.recalculate_totals()
        invoice.save()

    from backoffice.invoices.serializers import InvoiceSerializer
    create_activity(
        request=request, activity_type='INVOICE_CREATED',
        description=f'Created invoice from estimate {estimate.estimate_number}',
        contact=estimate.contact, invoice=invoice
    )
    logger.info(f"Converted estimate {estimate.pk} to invoice {invoice.pk}")
    return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


# Sharing

@api_view(['POST'])
@permission_classes([IsAuthenticated, PluginEnabled('estimates')])
def estimate_share_create(request):
    return sharing.create_share(request, Estimate, EstimateShare, 'estimate', 'Estimate', EstimateShareSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated, PluginEnabled('estimates')])
def estimate_share_list(request, pk):
    return sharing.list_shares(request, Estimate, EstimateShare, 'estimate', 'Estimate', EstimateShareSerializer, pk)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, PluginEnabled('estimates')])
def estimate_share_revoke(request, share_id):
    return sharing.revoke_share(request, EstimateShare, EstimateShareSerializer, share_id)


@api_view(['GET'])
@permission_classes([AllowAny, PluginEnabled('estimates')])
def estimate_public(request, token):
    """Read-only view of a shared estimate; no login required"""
    return sharing.public_document(EstimateShare, 'estimate', 'Estimate', EstimateSerializer, token)
