"""
Public share links for invoices and estimates.

A share grants unauthenticated, read-only access to a single document
until ``valid_until``. Tokens are 24 random bytes rendered in base62.
"""
import logging
import secrets
from datetime import datetime

from django.conf import settings
from django.db import models
from django.db.models import F
from django.utils import timezone
from django.utils.dateparse import parse_datetime, parse_date
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)

BASE62_ALPHABET = '0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ'
SHARE_TOKEN_BYTES = 24
SHARE_TOKEN_MIN_LENGTH = 32


def base62_encode(data: bytes) -> str:
    """Encode bytes as a base62 string, left-padded with '0' to 32 characters."""
    num = int.from_bytes(data, 'big')
    if num == 0:
        return '0'
    chars = []
    while num > 0:
        num, rem = divmod(num, 62)
        chars.append(BASE62_ALPHABET[rem])
    return ''.join(reversed(chars)).rjust(SHARE_TOKEN_MIN_LENGTH, '0')


def generate_share_token() -> str:
    return base62_encode(secrets.token_bytes(SHARE_TOKEN_BYTES))


def parse_valid_until(value):
    """Parse an ISO date or datetime into an aware datetime, or None."""
    if not value:
        return None
    if not isinstance(value, str):
        return None
    try:
        day = parse_date(value)
        parsed = parse_datetime(value) if day is None else None
    except ValueError:
        return None
    if day is not None:
        parsed = datetime(day.year, day.month, day.day, 23, 59, 59)
    if parsed is None:
        return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


class ShareTokenError(Exception):
    """A share link cannot be issued with the requested expiry"""


def resolve_valid_until(value):
    """Parse ``value`` and require it to lie in the future"""
    valid_until = parse_valid_until(value)
    if valid_until is None or valid_until <= timezone.now():
        raise ShareTokenError('Valid until date must be in the future')
    return valid_until


class ShareQuerySet(models.QuerySet):
    def active(self):
        return self.filter(valid_until__gt=timezone.now())

    def expired(self):
        return self.filter(valid_until__lte=timezone.now())


class ShareBase(models.Model):
    """Common fields of a time-limited public share link"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='+')
    share_token = models.CharField(max_length=64, unique=True, default=generate_share_token)
    valid_until = models.DateTimeField()
    accessed_count = models.PositiveIntegerField(default=0)
    last_accessed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ShareQuerySet.as_manager()

    class Meta:
        abstract = True
        ordering = ['-created_at']

    @property
    def is_expired(self):
        return self.valid_until <= timezone.now()

    def record_access(self):
        """Increment the access counter without racing concurrent readers"""
        now = timezone.now()
        type(self).objects.filter(pk=self.pk).update(
            accessed_count=F('accessed_count') + 1,
            last_accessed_at=now,
        )
        self.refresh_from_db(fields=['accessed_count', 'last_accessed_at'])


# Shared view bodies; invoices and estimates bind them to their own models.

def create_share(request, document_model, share_model, document_field, label, serializer_class):
    document_id = request.data.get(document_field)
    valid_until_raw = request.data.get('valid_until')
    if not document_id or not valid_until_raw:
        return Response(
            {'error': f'{label} ID and valid until date are required'},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        valid_until = resolve_valid_until(valid_until_raw)
    except ShareTokenError as e:
        return Response(
            {'error': str(e)},
            status=status.HTTP_400_BAD_REQUEST
        )

    document = document_model.objects.filter(pk=document_id, user=request.user).first()
    if document is None:
        return Response(
            {'error': f'{label} not found or access denied'},
            status=status.HTTP_404_NOT_FOUND
        )

    share = share_model.objects.create(
        user=request.user,
        valid_until=valid_until,
        **{document_field: document},
    )
    logger.info(f"Created share {share.pk} for {label.lower()} {document.pk} valid until {valid_until}")
    return Response(serializer_class(share).data, status=status.HTTP_201_CREATED)


def list_shares(request, document_model, share_model, document_field, label, serializer_class, pk):
    document = document_model.objects.filter(pk=pk, user=request.user).first()
    if document is None:
        return Response(
            {'error': f'{label} not found or access denied'},
            status=status.HTTP_404_NOT_FOUND
        )
    shares = share_model.objects.filter(**{document_field: document}).order_by('-created_at')
    return Response(serializer_class(shares, many=True).data)


def revoke_share(request, share_model, serializer_class, share_id):
    share = share_model.objects.filter(pk=share_id, user=request.user).first()
    if share is None:
        return Response(
            {'error': 'Share not found or access denied'},
            status=status.HTTP_404_NOT_FOUND
        )
    data = serializer_class(share).data
    share.delete()
    return Response({'message': 'Share revoked successfully', 'share': data})


def public_document(share_model, document_field, label, serializer_class, token):
    share = (
        share_model.objects.active()
        .select_related(document_field)
        .filter(share_token=token)
        .first()
    )
    if share is None:
        return Response(
            {'error': f'{label} not found or link expired'},
            status=status.HTTP_404_NOT_FOUND
        )
    share.record_access()
    data = serializer_class(getattr(share, document_field)).data
    data['accessed_count'] = share.accessed_count
    data['share_valid_until'] = share.valid_until
    return Response(data)
