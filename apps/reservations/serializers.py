"""Serializers for the reservation domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.venues.serializers import SessionSerializer

from .models import Reservation, ReservationParticipant


class ReservationCreateSerializer(serializers.Serializer):
    """Input for booking one or more sessions."""

    venue = serializers.UUIDField()
    session_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    invitee_emails = serializers.ListField(child=serializers.EmailField(), required=False, default=list)
    participant_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        default=list,
    )
    is_split_payment = serializers.BooleanField(required=False, default=False)


class ReservationUpdateSerializer(serializers.Serializer):
    """Patchable fields: payment mode and additional invitees."""

    is_split_payment = serializers.BooleanField(required=False)
    invitee_emails = serializers.ListField(child=serializers.EmailField(), required=False, default=list)

    def validate(self, attrs):  # type: ignore
        if "is_split_payment" not in attrs and not attrs.get("invitee_emails"):
            raise serializers.ValidationError("Nothing to update.")
        return attrs


class ReservationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Reservation.Status.choices)


class ParticipantSerializer(serializers.ModelSerializer):
    user_id = serializers.ReadOnlyField()
    is_registered = serializers.SerializerMethodField()
    has_paid = serializers.SerializerMethodField()

    class Meta:
        model = ReservationParticipant
        fields = ["user_id", "email", "is_registered", "has_paid"]

    def get_is_registered(self, obj: ReservationParticipant) -> bool:
        return not obj.is_placeholder

    def get_has_paid(self, obj: ReservationParticipant) -> bool:
        if obj.is_placeholder:
            return False
        return any(user.pk == obj.user_id for user in obj.reservation.paid_participants.all())


class ReservationSerializer(serializers.ModelSerializer):
    """Detailed reservation representation."""

    organizer_id = serializers.ReadOnlyField(source="organizer.id")
    venue_id = serializers.ReadOnlyField(source="venue.id")
    venue_name = serializers.ReadOnlyField(source="venue.name")
    sessions = SessionSerializer(many=True, read_only=True)
    participants = ParticipantSerializer(many=True, read_only=True)
    paid_participant_ids = serializers.SerializerMethodField()

    class Meta:
        model = Reservation
        fields = [
            "id",
            "booking_reference",
            "organizer_id",
            "venue_id",
            "venue_name",
            "sessions",
            "participants",
            "total_price",
            "currency",
            "is_split_payment",
            "paid_participant_ids",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_paid_participant_ids(self, obj: Reservation) -> list[int]:
        return sorted(user.pk for user in obj.paid_participants.all())
