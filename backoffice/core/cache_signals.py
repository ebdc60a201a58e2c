"""
Cache invalidation signals
Bump the cached list version of the owning user whenever a contact or product changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .model_cache import invalidate_contact_list, invalidate_product_list

logger = logging.getLogger(__name__)


@receiver([post_save, post_delete], sender='contacts.Contact')
def invalidate_contact_cache(sender, instance, **kwargs):
    try:
        invalidate_contact_list(instance.user_id)
    except Exception as e:
        logger.warning(f"Contact cache invalidation failed for user {instance.user_id}: {e}")


@receiver([post_save, post_delete], sender='products.Product')
def invalidate_product_cache(sender, instance, **kwargs):
    try:
        invalidate_product_list(instance.user_id)
    except Exception as e:
        logger.warning(f"Product cache invalidation failed for user {instance.user_id}: {e}")
