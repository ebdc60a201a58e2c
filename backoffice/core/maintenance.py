"""
Database housekeeping: pruning old activity rows and expired share links,
and refreshing planner statistics.
"""
import logging
from datetime import timedelta

from django.db import connection, transaction
from django.utils import timezone

from .models import Activity

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_RETENTION_DAYS = 30


def cleanup_old_activities(days=DEFAULT_ACTIVITY_RETENTION_DAYS):
    """Delete activities older than ``days``; returns the number of rows removed"""
    cutoff = timezone.now() - timedelta(days=days)
    deleted, _ = Activity.objects.filter(created_at__lt=cutoff).delete()
    logger.info(f"Deleted {deleted} activities older than {days} days")
    return deleted


def clean_expired_shares():
    """Delete invoice and estimate shares past their valid_until"""
    from backoffice.invoices.models import InvoiceShare
    from backoffice.estimates.models import EstimateShare

    deleted = 0
    for share_model in (InvoiceShare, EstimateShare):
        count, _ = share_model.objects.expired().delete()
        deleted += count
    logger.info(f"Deleted {deleted} expired share links")
    return deleted


def analyze_database():
    with connection.cursor() as cursor:
        cursor.execute('ANALYZE')
    logger.info(f"ANALYZE completed on {connection.vendor}")


def run_full_optimization(activity_days=DEFAULT_ACTIVITY_RETENTION_DAYS):
    """
    Run every maintenance task. Failures are logged and reported in the
    result instead of raised.
    """
    try:
        with transaction.atomic():
            activities = cleanup_old_activities(activity_days)
            shares = clean_expired_shares()
        analyze_database()
    except Exception as e:
        logger.error(f"Database optimization failed: {e}", exc_info=True)
        return {'success': False, 'deleted': None, 'message': str(e)}

    return {
        'success': True,
        'deleted': {'activities': activities, 'shares': shares},
        'message': f"Removed {activities} old activities and {shares} expired shares; statistics refreshed",
    }
