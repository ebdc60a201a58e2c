"""Utility functions for activity logging"""
import logging

from .models import Activity

logger = logging.getLogger(__name__)


def create_activity(request=None, activity_type=None, description=None, user=None,
                    contact=None, invoice=None):
    """
    Create an activity feed entry

    Args:
        request: Django request object (for user) - optional if user is provided
        activity_type: One of Activity.TYPE_CHOICES (CONTACT_CREATED, INVOICE_UPDATED, ...)
        description: Human-readable description shown in the feed
        user: Optional user override (defaults to request.user if request provided)
        contact: Related contact, if any
        invoice: Related invoice, if any

    Never raises: a failure to log must not fail the operation being logged.
    """
    try:
        activity_user = user
        if activity_user is None and request is not None and hasattr(request, 'user'):
            activity_user = request.user

        if not activity_type or not description:
            logger.warning(
                f"Activity creation skipped: missing required fields "
                f"(activity_type={activity_type}, description={description})"
            )
            return None

        return Activity.objects.create(
            user=activity_user if activity_user and activity_user.is_authenticated else None,
            activity_type=activity_type,
            description=description,
            contact=contact,
            invoice=invoice,
        )
    except Exception as e:
        logger.error(f"Failed to create activity {activity_type}: {e}", exc_info=True)
        return None
