"""Serializers for venues and sessions."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Session, Venue


class VenueSerializer(serializers.ModelSerializer):
    class Meta:
        model = Venue
        fields = ["id", "name", "location", "capacity", "description", "is_available"]
        read_only_fields = fields


class SessionSerializer(serializers.ModelSerializer):
    """Read-only representation of a bookable slot."""

    venue_id = serializers.ReadOnlyField(source="venue.id")
    venue_name = serializers.ReadOnlyField(source="venue.name")

    class Meta:
        model = Session
        fields = [
            "id",
            "venue_id",
            "venue_name",
            "date",
            "start_time",
            "end_time",
            "price",
            "status",
        ]
        read_only_fields = fields
