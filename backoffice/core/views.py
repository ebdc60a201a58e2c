import logging
from decimal import Decimal

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.db.models import Count, Sum, Q
from django.utils import timezone

from .errors import not_found_response
from .models import Setting, Activity
from .serializers import UserSerializer, UserCreateSerializer, SettingSerializer, ActivitySerializer

logger = logging.getLogger(__name__)

User = get_user_model()

DEFAULT_ACTIVITY_LIMIT = 10
MAX_ACTIVITY_LIMIT = 100


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports tokens of deleted users as invalid"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        token = CustomTokenObtainPairSerializer.get_token(user)
        logger.info(f"Registered user {user.username}")
        return Response({
            'user': UserSerializer(user).data,
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with the plugins enabled for this installation"""
    data = UserSerializer(request.user).data
    data['plugins'] = list(getattr(settings, 'BACKOFFICE_PLUGINS', []))
    return Response(data)


# Activity feed
@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def activity_list(request):
    """
    GET: the user's most recent activities, newest first (``?limit=``,
    default 10, max 100).
    DELETE: clear the user's activity feed.
    """
    queryset = Activity.objects.filter(user=request.user)

    if request.method == 'DELETE':
        deleted, _ = queryset.delete()
        logger.info(f"Cleared {deleted} activities for user {request.user.id}")
        return Response({'deleted': deleted})

    try:
        limit = int(request.query_params.get('limit', DEFAULT_ACTIVITY_LIMIT))
    except (TypeError, ValueError):
        limit = DEFAULT_ACTIVITY_LIMIT
    limit = max(1, min(limit, MAX_ACTIVITY_LIMIT))

    activities = queryset.select_related('contact', 'invoice').order_by('-created_at', '-id')[:limit]
    return Response(ActivitySerializer(activities, many=True).data)


# Settings
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def setting_list(request):
    settings_qs = Setting.objects.all()
    return Response(SettingSerializer(settings_qs, many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def setting_detail(request, key):
    """Read a setting by key, or create/replace it (upsert)"""
    if request.method == 'GET':
        setting = Setting.objects.filter(key=key).first()
        if setting is None:
            return not_found_response('Setting')
        return Response(SettingSerializer(setting).data)

    value = request.data.get('value')
    if value is None:
        return Response({'error': 'Value is required'}, status=status.HTTP_400_BAD_REQUEST)

    defaults = {'value': str(value)}
    for field in ('type', 'description'):
        if field in request.data:
            defaults[field] = request.data[field]
    setting, created = Setting.objects.update_or_create(key=key, defaults=defaults)
    return Response(
        SettingSerializer(setting).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )


# Dashboard
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats(request):
    """Headline figures for the dashboard"""
    from backoffice.contacts.models import Contact
    from backoffice.products.models import Product
    from backoffice.estimates.models import Estimate
    from backoffice.invoices.models import Invoice

    user = request.user
    today = timezone.localdate()

    invoices = Invoice.objects.filter(user=user)
    invoice_counts = {choice: 0 for choice, _ in Invoice.STATUS_CHOICES}
    for row in invoices.values('status').annotate(count=Count('id')):
        invoice_counts[row['status']] = row['count']

    overdue_filter = Q(status='overdue') | Q(status='sent', due_date__lt=today)
    amounts = invoices.aggregate(
        unpaid=Sum('total', filter=Q(status__in=['sent', 'overdue'])),
        paid=Sum('total', filter=Q(status='paid')),
        overdue_count=Count('id', filter=overdue_filter),
    )

    estimate_counts = {choice: 0 for choice, _ in Estimate.STATUS_CHOICES}
    for row in Estimate.objects.filter(user=user).values('status').annotate(count=Count('id')):
        estimate_counts[row['status']] = row['count']
    decided = estimate_counts['accepted'] + estimate_counts['rejected']
    acceptance_rate = round(estimate_counts['accepted'] * 100 / decided, 1) if decided else None

    return Response({
        'invoices': {
            'by_status': invoice_counts,
            'total': sum(invoice_counts.values()),
            'overdue': amounts['overdue_count'],
            'unpaid_amount': amounts['unpaid'] or Decimal('0.00'),
            'paid_amount': amounts['paid'] or Decimal('0.00'),
        },
        'estimates': {
            'by_status': estimate_counts,
            'total': sum(estimate_counts.values()),
            'acceptance_rate': acceptance_rate,
        },
        'contacts': Contact.objects.filter(user=user).count(),
        'products': Product.objects.filter(user=user).count(),
    })
