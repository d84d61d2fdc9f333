"""Admin registration for venues and sessions."""

from __future__ import annotations

from django.contrib import admin

from .models import Session, Venue


class SessionInline(admin.TabularInline):
    model = Session
    extra = 0
    fields = ("date", "start_time", "end_time", "price", "status")


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "capacity", "is_available", "created_at")
    list_filter = ("is_available",)
    search_fields = ("name", "location")
    inlines = [SessionInline]


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ("venue", "date", "start_time", "end_time", "price", "status")
    list_filter = ("status", "venue", "date")
    readonly_fields = ("created_at", "updated_at")
