"""FilterSet definitions for the session listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Session


class SessionFilterSet(django_filters.FilterSet):
    """Filters sessions by venue, a single day or a date range, and status."""

    venue = django_filters.UUIDFilter(field_name="venue_id")
    date = django_filters.DateFilter(field_name="date")
    date_from = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="date", lookup_expr="lte")
    status = django_filters.ChoiceFilter(choices=Session.Status.choices)

    class Meta:
        model = Session
        fields = ["venue", "date", "date_from", "date_to", "status"]
