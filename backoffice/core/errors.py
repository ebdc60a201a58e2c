"""Error response helpers shared by plugin views"""
from rest_framework import status
from rest_framework.response import Response


def conflict_response(field, message):
    """409 response for a unique-constraint violation on ``field``"""
    return Response(
        {'errors': [{'field': field, 'message': message}]},
        status=status.HTTP_409_CONFLICT
    )


def not_found_response(label):
    return Response({'error': f'{label} not found'}, status=status.HTTP_404_NOT_FOUND)


def first_conflict(model, user, candidates, exclude_pk=None):
    """
    Return ``(field, value)`` for the first candidate value already used by
    another record of ``user``, or None.

    ``candidates`` is an iterable of ``(field, value, extra_filter)`` where
    ``extra_filter`` narrows the lookup (e.g. only company contacts).
    """
    for field, value, extra_filter in candidates:
        if value in (None, ''):
            continue
        queryset = model.objects.filter(user=user, **{field: value}, **(extra_filter or {}))
        if exclude_pk is not None:
            queryset = queryset.exclude(pk=exclude_pk)
        if queryset.exists():
            return field, value
    return None
