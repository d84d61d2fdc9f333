"""
Payment Coordinator

Drives payers of a reservation through the payment gateway:
- initiate: one charge for the organizer (full payment) or one per payer (split)
- confirm: record a payer's successful payment on the reservation
- check_completion / status: read-only views of the payment state

Local state only changes through confirm, which delegates to
RecordPaymentHandler; a gateway failure during initiate leaves the
reservation untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from shared.domain.errors import ConflictError, ValidationError
from shared.domain.value_objects import Money
from apps.reservations.application.command_handlers import RecordPaymentCommand
from apps.reservations.domain.entities import ReservationStatus

from .providers import PaymentProvider

logger = logging.getLogger(__name__)

FULL = "full"
SPLIT = "split"

MESSAGE_CONFIRMED = "all participants successfully paid their share. reservation confirmed."
MESSAGE_WAITING = "payment recorded, waiting for other participants."


@dataclass(frozen=True)
class PaymentRequest:
    """One charge created for one payer. Not persisted."""
    reservation_id: UUID
    payer_id: int
    amount: Money
    external_reference: str
    client_secret: str = ""

    @property
    def amount_minor_units(self) -> int:
        return self.amount.minor_units


@dataclass(frozen=True)
class PaymentPlan:
    reservation_id: UUID
    mode: str
    total: Money
    participant_count: int
    requests: List[PaymentRequest] = field(default_factory=list)

    @property
    def per_person_amount(self) -> Optional[Decimal]:
        if self.mode != SPLIT:
            return None
        return self.requests[-1].amount.amount if self.requests else None


@dataclass(frozen=True)
class ConfirmResult:
    fully_confirmed: bool
    message: str
    reservation_id: UUID


class PaymentCoordinator:
    """
    Coordinates charges and confirmations for reservations

    The payment provider is injected; nothing here talks to a global client.
    """

    def __init__(self, provider: PaymentProvider, reservation_repo, record_payment_handler):
        self.provider = provider
        self.reservation_repo = reservation_repo
        self.record_payment_handler = record_payment_handler

    def initiate(self, reservation_id: UUID) -> PaymentPlan:
        """
        Create the charges for a reservation

        Raises:
            NotFoundError: Reservation does not exist
            ValidationError: Total price is not positive
            ConflictError: Reservation is cancelled
            PaymentProviderError: Gateway failed; no local state changes
        """
        reservation = self.reservation_repo.get_by_id(reservation_id)

        if reservation.total_price.amount <= 0:
            raise ValidationError("Invalid total price.")
        if reservation.status == ReservationStatus.CANCELLED:
            raise ConflictError("Cannot pay for a cancelled reservation.")

        mode = SPLIT if reservation.is_split_payment else FULL
        logger.info(
            f"Initiating {mode} payment for {reservation.booking_reference}: "
            f"{reservation.total_price.amount} {reservation.total_price.currency}, "
            f"{len(reservation.billed_payer_ids)} payer(s)"
        )

        requests: List[PaymentRequest] = []
        for payer_id in reservation.billed_payer_ids:
            amount = reservation.amount_due(payer_id)
            charge = self.provider.create_charge(
                amount.minor_units,
                amount.currency,
                {
                    "reservation_id": str(reservation.id),
                    "booking_reference": reservation.booking_reference,
                    "payer": str(payer_id),
                    "type": mode,
                },
            )
            requests.append(PaymentRequest(
                reservation_id=reservation.id,
                payer_id=payer_id,
                amount=amount,
                external_reference=charge.external_reference,
                client_secret=charge.client_secret,
            ))

        return PaymentPlan(
            reservation_id=reservation.id,
            mode=mode,
            total=reservation.total_price,
            participant_count=reservation.participant_count,
            requests=requests,
        )

    def confirm(self, reservation_id: UUID, payer_id: int) -> ConfirmResult:
        """Record a successful payment; safe to call repeatedly for the same payer"""
        outcome = self.record_payment_handler.handle(
            RecordPaymentCommand(reservation_id=reservation_id, payer_id=payer_id)
        )
        return ConfirmResult(
            fully_confirmed=outcome.fully_confirmed,
            message=MESSAGE_CONFIRMED if outcome.fully_confirmed else MESSAGE_WAITING,
            reservation_id=reservation_id,
        )

    def check_completion(self, reservation_id: UUID) -> bool:
        reservation = self.reservation_repo.get_by_id(reservation_id)
        return reservation.status == ReservationStatus.CONFIRMED

    def status(self, reservation_id: UUID) -> dict:
        reservation = self.reservation_repo.get_by_id(reservation_id)
        required = reservation.required_payer_ids
        return {
            "reservation_id": str(reservation.id),
            "status": reservation.status.value,
            "paid_count": len([payer for payer in required if payer in reservation.paid_participant_ids]),
            "required_count": len(required),
        }


def build_payment_coordinator(provider: PaymentProvider | None = None) -> PaymentCoordinator:
    from apps.reservations.application.command_handlers import RecordPaymentHandler
    from apps.reservations.repositories import reservation_repository

    from .providers import get_payment_provider

    return PaymentCoordinator(
        provider=provider or get_payment_provider(),
        reservation_repo=reservation_repository,
        record_payment_handler=RecordPaymentHandler(reservation_repository),
    )
