"""Row locking helpers shared by the repositories."""

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore


def lock_for_update(queryset):
    """
    Apply select_for_update when inside transaction.atomic().

    Outside a transaction there is nothing to hold the lock, so the queryset
    is returned untouched. Backends without row locks (SQLite) ignore the
    clause; there the write lock taken at BEGIN IMMEDIATE serializes writers.
    """
    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset
