"""Admin registration for reservations."""

from __future__ import annotations

from django.contrib import admin

from .models import Reservation, ReservationParticipant


class ParticipantInline(admin.TabularInline):
    model = ReservationParticipant
    extra = 0
    fields = ("user", "email", "position")


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "booking_reference",
        "venue",
        "organizer",
        "status",
        "is_split_payment",
        "total_price",
        "currency",
        "created_at",
    )
    list_filter = ("status", "is_split_payment", "venue")
    search_fields = ("booking_reference", "organizer__email", "participants__email")
    readonly_fields = ("booking_reference", "total_price", "currency", "created_at", "updated_at")
    filter_horizontal = ("sessions", "paid_participants")
    inlines = [ParticipantInline]
