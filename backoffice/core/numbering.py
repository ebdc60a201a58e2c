"""
Yearly document numbering (``INV2025-007``, ``2025-014``).

Numbers are allocated as the highest sequence already used by the user this
year plus one. Callers save inside ``allocate_number`` so that a concurrent
allocation of the same number surfaces as an IntegrityError and is retried.
"""
import logging

from django.db import transaction, IntegrityError
from django.utils import timezone

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 100


class NumberAllocationError(Exception):
    """Raised when no free document number could be allocated"""


def format_number(prefix, year, sequence, width=3):
    return f"{prefix}{year}-{str(sequence).zfill(width)}"


def next_number(existing_numbers, prefix, year=None, width=3):
    """Return the next number after the highest ``{prefix}{year}-NNN`` in ``existing_numbers``."""
    year = year or timezone.localdate().year
    head = f"{prefix}{year}-"
    highest = 0
    for number in existing_numbers:
        if not number or not number.startswith(head):
            continue
        try:
            highest = max(highest, int(number[len(head):]))
        except ValueError:
            continue
    return format_number(prefix, year, highest + 1, width)


def allocate_number(queryset, field, prefix, save, width=3):
    """
    Allocate the next free number for ``queryset`` (already scoped to a user)
    and persist it via ``save(number)``. Retries on unique collisions.
    """
    year = timezone.localdate().year
    head = f"{prefix}{year}-"
    for attempt in range(MAX_ATTEMPTS):
        existing = queryset.filter(**{f"{field}__startswith": head}).values_list(field, flat=True)
        candidate = next_number(existing, prefix, year=year, width=width)
        if attempt:
            # Skip past numbers taken between our read and our write
            sequence = int(candidate[len(head):]) + attempt
            candidate = format_number(prefix, year, sequence, width)
        try:
            with transaction.atomic():
                return save(candidate)
        except IntegrityError:
            logger.info(f"Number {candidate} already taken, retrying ({attempt + 1}/{MAX_ATTEMPTS})")
    raise NumberAllocationError(f"Could not find available {field.replace('_', ' ')}")


def next_contact_number(existing_numbers):
    """
    Next contact number after the highest numeric one, zero-padded to two
    digits. Non-numeric numbers count as 0.
    """
    highest = 0
    for number in existing_numbers:
        try:
            highest = max(highest, int(str(number).strip()))
        except (TypeError, ValueError):
            continue
    return str(highest + 1).zfill(2)
