import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.cache import cache
from django.db import transaction, IntegrityError

from backoffice.core.errors import conflict_response, first_conflict, not_found_response
from backoffice.core.model_cache import get_contact_list_cache_key, CONTACT_LIST_CACHE_TTL
from backoffice.core.numbering import next_contact_number
from backoffice.core.permissions import PluginEnabled
from backoffice.core.utils import create_activity
from .filters import ContactFilter
from .models import Contact
from .serializers import ContactSerializer

logger = logging.getLogger(__name__)


def _find_conflict(user, data, exclude_pk=None):
    contact_type = data.get('contact_type', 'company')
    candidates = [('contact_number', data.get('contact_number'), None)]
    if contact_type == 'company':
        candidates.append(('organization_number', data.get('organization_number'), {'contact_type': 'company'}))
    else:
        candidates.append(('personal_number', data.get('personal_number'), {'contact_type': 'private'}))
    return first_conflict(Contact, user, candidates, exclude_pk=exclude_pk)


CONFLICT_MESSAGES = {
    'contact_number': 'Contact number "{value}" already exists',
    'organization_number': 'Organization number "{value}" already exists',
    'personal_number': 'Personal number "{value}" already exists',
}


def _save_contact(request, serializer, instance=None):
    """Check uniqueness, save and log; returns a Response"""
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    if instance is not None:
        if 'contact_number' in data and not data['contact_number']:
            # A blank number on update keeps the existing one
            serializer.validated_data.pop('contact_number')
            data.pop('contact_number')
        for field in ('contact_type', 'contact_number', 'organization_number', 'personal_number'):
            data.setdefault(field, getattr(instance, field))
    elif not data.get('contact_number'):
        data['contact_number'] = next_contact_number(
            Contact.objects.filter(user=request.user).values_list('contact_number', flat=True)
        )

    conflict = _find_conflict(request.user, data, exclude_pk=instance.pk if instance else None)
    if conflict:
        field, value = conflict
        return conflict_response(field, CONFLICT_MESSAGES[field].format(value=value))

    try:
        with transaction.atomic():
            if instance is None:
                contact = serializer.save(user=request.user, contact_number=data['contact_number'])
            else:
                contact = serializer.save()
    except IntegrityError:
        logger.warning(f"Contact number collision for user {request.user.id}: {data.get('contact_number')}")
        return conflict_response(
            'contact_number', CONFLICT_MESSAGES['contact_number'].format(value=data.get('contact_number'))
        )

    if instance is None:
        create_activity(
            request=request, activity_type='CONTACT_CREATED',
            description=f'Created contact: {contact.company_name}', contact=contact
        )
        return Response(ContactSerializer(contact).data, status=status.HTTP_201_CREATED)

    create_activity(
        request=request, activity_type='CONTACT_UPDATED',
        description=f'Updated contact: {contact.company_name}', contact=contact
    )
    return Response(ContactSerializer(contact).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, PluginEnabled('contacts')])
def contact_list_create(request):
    """List the user's contacts or create a new contact"""
    if request.method == 'GET':
        filters = {
            'search': request.query_params.get('search', ''),
            'contact_type': request.query_params.get('contact_type', ''),
        }
        cache_key = get_contact_list_cache_key(request.user.id, **filters)
        cached_data = cache.get(cache_key)
        if cached_data is not None:
            return Response(cached_data)

        queryset = Contact.objects.filter(user=request.user).order_by('contact_number', 'id')
        filterset = ContactFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        response_data = ContactSerializer(filterset.qs, many=True).data

        cache.set(cache_key, response_data, CONTACT_LIST_CACHE_TTL)
        return Response(response_data)

    return _save_contact(request, ContactSerializer(data=request.data))


@api_view(['GET'])
@permission_classes([IsAuthenticated, PluginEnabled('contacts')])
def contact_next_number(request):
    """Next free contact number for the current user"""
    number = next_contact_number(
        Contact.objects.filter(user=request.user).values_list('contact_number', flat=True)
    )
    return Response({'contact_number': number})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, PluginEnabled('contacts')])
def contact_detail(request, pk):
    """Retrieve, update or delete a contact"""
    contact = Contact.objects.filter(pk=pk, user=request.user).first()
    if contact is None:
        return not_found_response('Contact')

    if request.method == 'GET':
        return Response(ContactSerializer(contact).data)
    elif request.method == 'PUT':
        return _save_contact(request, ContactSerializer(contact, data=request.data), instance=contact)
    elif request.method == 'PATCH':
        return _save_contact(request, ContactSerializer(contact, data=request.data, partial=True), instance=contact)
    else:  # DELETE
        contact_id = contact.pk
        contact_name = contact.company_name
        contact.delete()
        create_activity(
            request=request, activity_type='CONTACT_DELETED',
            description=f'Deleted contact: {contact_name}'
        )
        logger.info(f"Deleted contact {contact_id} for user {request.user.id}")
        return Response({'id': contact_id})
