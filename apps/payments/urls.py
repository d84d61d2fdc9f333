"""URL routing for payments."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import ConfirmPaymentView, InitiatePaymentView, PaymentStatusView

urlpatterns = [
    path("<uuid:reservation_id>/initiate/", InitiatePaymentView.as_view(), name="payment-initiate"),
    path("<uuid:reservation_id>/confirm/", ConfirmPaymentView.as_view(), name="payment-confirm"),
    path("<uuid:reservation_id>/status/", PaymentStatusView.as_view(), name="payment-status"),
]
