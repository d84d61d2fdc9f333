"""Serializers for payments."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .services import SPLIT, PaymentPlan


class ConfirmPaymentSerializer(serializers.Serializer):
    payer_id = serializers.IntegerField(min_value=1, required=False)


def serialize_plan(plan: PaymentPlan) -> dict:
    """Single charge for full payment, payer -> charge map for split payment."""
    if plan.mode != SPLIT:
        request = plan.requests[0]
        return {
            "type": plan.mode,
            "reservation_id": str(plan.reservation_id),
            "amount": str(request.amount.amount),
            "currency": request.amount.currency,
            "payer_id": request.payer_id,
            "external_reference": request.external_reference,
            "client_secret": request.client_secret,
        }

    return {
        "type": plan.mode,
        "reservation_id": str(plan.reservation_id),
        "total_amount": str(plan.total.amount),
        "currency": plan.total.currency,
        "per_person_amount": str(plan.per_person_amount),
        "total_participants": plan.participant_count,
        "intents": {
            str(request.payer_id): {
                "payer_id": request.payer_id,
                "amount": str(request.amount.amount),
                "external_reference": request.external_reference,
                "client_secret": request.client_secret,
            }
            for request in plan.requests
        },
    }
