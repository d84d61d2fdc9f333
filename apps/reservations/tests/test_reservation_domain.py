"""Unit tests for the Reservation aggregate and pricing rules (no database)."""

import uuid
from decimal import Decimal

import pytest

from shared.domain.errors import ConflictError, ValidationError
from shared.domain.value_objects import Money
from apps.reservations.domain.entities import (
    PendingParticipant,
    RegisteredParticipant,
    Reservation,
    ReservationStatus,
)
from apps.reservations.domain.events import (
    ParticipantInvited,
    PaymentRecorded,
    ReservationConfirmed,
    ReservationStatusChanged,
)
from apps.reservations.domain.pricing import compute_share, compute_total, split_shares

ORGANIZER = 1


class FakeSession:
    def __init__(self, price):
        self.price = Decimal(price)


def make_reservation(total="45.00", split=False, participants=None):
    reservation = Reservation(
        booking_reference="GT-TEST0001",
        organizer_id=ORGANIZER,
        venue_id=uuid.uuid4(),
        session_ids=(uuid.uuid4(), uuid.uuid4()),
        total_price=Money(Decimal(total)),
        is_split_payment=split,
    )
    if participants:
        reservation.invite(participants)
        reservation.clear_events()
    return reservation


class TestPricing:
    def test_total_is_sum_of_session_prices(self):
        assert compute_total([FakeSession("20.00"), FakeSession("25.00")]).amount == Decimal("45.00")

    def test_total_of_no_sessions_is_invalid(self):
        with pytest.raises(ValidationError):
            compute_total([])

    def test_share_for_two_participants(self):
        assert compute_share(Money(Decimal("45.00")), 2).amount == Decimal("22.50")

    def test_participant_count_below_one_is_invalid(self):
        with pytest.raises(ValidationError):
            split_shares(Money(Decimal("45.00")), 0)

    def test_organizer_absorbs_the_rounding_remainder(self):
        shares = split_shares(Money(Decimal("10.00")), 3)
        assert shares[0].amount == Decimal("3.34")
        assert sum(share.amount for share in shares) == Decimal("10.00")


class TestConstruction:
    def test_requires_a_session(self):
        with pytest.raises(ValidationError):
            Reservation(
                booking_reference="GT-X",
                organizer_id=ORGANIZER,
                venue_id=uuid.uuid4(),
                session_ids=(),
                total_price=Money(Decimal("10")),
            )

    def test_rejects_duplicate_sessions(self):
        session_id = uuid.uuid4()
        with pytest.raises(ValidationError):
            Reservation(
                booking_reference="GT-X",
                organizer_id=ORGANIZER,
                venue_id=uuid.uuid4(),
                session_ids=(session_id, session_id),
                total_price=Money(Decimal("10")),
            )


class TestInvite:
    def test_organizer_and_duplicates_are_skipped(self):
        reservation = make_reservation()
        added = reservation.invite([
            RegisteredParticipant(user_id=ORGANIZER),
            RegisteredParticipant(user_id=2),
            RegisteredParticipant(user_id=2),
            PendingParticipant(email="new@example.com"),
            PendingParticipant(email="NEW@example.com"),
        ])

        assert added == [RegisteredParticipant(user_id=2), PendingParticipant(email="new@example.com")]
        assert reservation.participant_count == 3

    def test_invite_emits_one_event_per_added_participant(self):
        reservation = make_reservation(split=True)
        reservation.invite([RegisteredParticipant(user_id=2), PendingParticipant(email="x@example.com")])

        invited = [event for event in reservation.events if isinstance(event, ParticipantInvited)]
        assert [event.user_id for event in invited] == [2, None]
        assert all(event.payment_required for event in invited)
        assert invited[0].share_amount == Decimal("15.00")

    def test_full_payment_invitees_are_covered(self):
        reservation = make_reservation(split=False)
        reservation.invite([PendingParticipant(email="x@example.com")])
        event = reservation.events[0]
        assert event.payment_required is False
        assert event.share_amount is None

    def test_cannot_invite_to_a_confirmed_reservation(self):
        reservation = make_reservation()
        reservation.record_payment(ORGANIZER)
        with pytest.raises(ConflictError):
            reservation.invite([RegisteredParticipant(user_id=2)])

    def test_cannot_invite_to_split_reservation_after_a_payment(self):
        reservation = make_reservation(split=True, participants=[RegisteredParticipant(user_id=2)])
        reservation.record_payment(ORGANIZER)
        with pytest.raises(ConflictError):
            reservation.invite([RegisteredParticipant(user_id=3)])
        assert reservation.registered_participant_ids == [2]


class TestRecordPayment:
    def test_full_payment_waits_for_registered_participants(self):
        reservation = make_reservation(participants=[RegisteredParticipant(user_id=2)])

        first = reservation.record_payment(ORGANIZER)
        assert not first.fully_confirmed
        assert first.pending_count == 1
        assert first.amount_paid.amount == Decimal("45.00")
        assert reservation.status == ReservationStatus.PENDING

        second = reservation.record_payment(2)
        assert second.became_confirmed
        assert second.amount_paid.amount == Decimal("0")
        assert reservation.status == ReservationStatus.CONFIRMED

    def test_full_payment_invitee_may_confirm_first(self):
        reservation = make_reservation(participants=[RegisteredParticipant(user_id=2)])
        reservation.record_payment(2)
        assert reservation.status == ReservationStatus.PENDING
        assert reservation.pending_payer_ids == [ORGANIZER]

    def test_full_payment_bills_only_the_organizer(self):
        reservation = make_reservation(participants=[RegisteredParticipant(user_id=2)])
        assert reservation.billed_payer_ids == [ORGANIZER]
        assert reservation.required_payer_ids == [ORGANIZER, 2]

    def test_split_payment_needs_every_registered_participant(self):
        reservation = make_reservation(split=True, participants=[RegisteredParticipant(user_id=2)])

        first = reservation.record_payment(ORGANIZER)
        assert not first.fully_confirmed
        assert first.pending_count == 1
        assert first.amount_paid.amount == Decimal("22.50")
        assert reservation.status == ReservationStatus.PENDING

        second = reservation.record_payment(2)
        assert second.fully_confirmed
        assert second.became_confirmed
        assert reservation.status == ReservationStatus.CONFIRMED

    def test_placeholder_never_blocks_confirmation(self):
        reservation = make_reservation(
            split=True,
            participants=[RegisteredParticipant(user_id=2), PendingParticipant(email="ghost@example.com")],
        )
        reservation.record_payment(ORGANIZER)
        outcome = reservation.record_payment(2)
        assert outcome.fully_confirmed
        assert reservation.share_for_participant().amount == Decimal("15.00")

    def test_repeat_payment_is_idempotent(self):
        reservation = make_reservation(
            split=True,
            participants=[RegisteredParticipant(user_id=2), RegisteredParticipant(user_id=3)],
        )
        reservation.record_payment(2)
        reservation.clear_events()

        again = reservation.record_payment(2)

        assert not again.newly_paid
        assert not again.fully_confirmed
        assert reservation.paid_participant_ids == {2}
        assert reservation.events == []

    def test_repeat_of_last_payer_stays_confirmed(self):
        reservation = make_reservation()
        reservation.record_payment(ORGANIZER)
        again = reservation.record_payment(ORGANIZER)
        assert again.fully_confirmed
        assert not again.became_confirmed
        assert reservation.status == ReservationStatus.CONFIRMED

    def test_events_for_the_final_payment(self):
        reservation = make_reservation(split=True, participants=[RegisteredParticipant(user_id=2)])
        reservation.record_payment(ORGANIZER)
        reservation.clear_events()

        reservation.record_payment(2)

        kinds = [type(event) for event in reservation.events]
        assert kinds == [PaymentRecorded, ReservationConfirmed]

    def test_stranger_cannot_pay(self):
        reservation = make_reservation(split=True, participants=[RegisteredParticipant(user_id=2)])
        with pytest.raises(ValidationError):
            reservation.record_payment(99)

    def test_placeholder_cannot_pay_under_full_payment(self):
        reservation = make_reservation(participants=[PendingParticipant(email="ghost@example.com")])
        with pytest.raises(ValidationError):
            reservation.record_payment(2)

    def test_cancelled_reservation_rejects_payment(self):
        reservation = make_reservation()
        reservation.change_status(ReservationStatus.CANCELLED)
        with pytest.raises(ConflictError):
            reservation.record_payment(ORGANIZER)


class TestResolveParticipant:
    def test_placeholder_becomes_registered(self):
        reservation = make_reservation(participants=[PendingParticipant(email="late@example.com")])

        assert reservation.resolve_participant("Late@Example.com", 7)

        assert reservation.participants == [RegisteredParticipant(user_id=7, email="late@example.com")]

    def test_second_resolution_changes_nothing(self):
        reservation = make_reservation(participants=[PendingParticipant(email="late@example.com")])
        reservation.resolve_participant("late@example.com", 7)
        assert not reservation.resolve_participant("late@example.com", 7)

    def test_placeholder_of_existing_participant_is_dropped(self):
        reservation = make_reservation(
            participants=[RegisteredParticipant(user_id=7), PendingParticipant(email="seven@example.com")],
        )
        reservation.resolve_participant("seven@example.com", 7)
        assert reservation.participants == [RegisteredParticipant(user_id=7)]

    def test_resolved_participant_becomes_a_payer(self):
        reservation = make_reservation(split=True, participants=[PendingParticipant(email="late@example.com")])
        reservation.resolve_participant("late@example.com", 7)
        assert reservation.required_payer_ids == [ORGANIZER, 7]


class TestAdministration:
    def test_status_override_from_any_state(self):
        reservation = make_reservation()
        reservation.record_payment(ORGANIZER)
        reservation.change_status(ReservationStatus.PENDING)

        assert reservation.status == ReservationStatus.PENDING
        event = reservation.events[-1]
        assert isinstance(event, ReservationStatusChanged)
        assert (event.old_status, event.new_status) == ("confirmed", "pending")

    def test_split_mode_is_locked_after_a_payment(self):
        reservation = make_reservation(split=True, participants=[RegisteredParticipant(user_id=2)])
        reservation.record_payment(ORGANIZER)
        with pytest.raises(ConflictError):
            reservation.change_split_mode(False)

    def test_split_mode_can_change_before_payments(self):
        reservation = make_reservation()
        reservation.change_split_mode(True)
        assert reservation.is_split_payment
