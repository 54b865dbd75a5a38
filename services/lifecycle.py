import logging
import re
from datetime import date, datetime

from sqlalchemy import select

from models.booking import Booking, BookingStatus, FlightBookingReference, RoomBooking
from models.booking_history import BookingStatusChange
from models.notification import NotificationType
from models.payment import PaymentInfo
from models.user import User
from services.errors import (
    AlreadyCancelled,
    AlreadyProcessed,
    Forbidden,
    InvalidPayment,
    InvalidRelation,
    NotFound,
    Unauthorized,
)
from services.notifications import NotificationEvent

logger = logging.getLogger(__name__)

CARD_NUMBER_RE = re.compile(r"^\d{16}$")
EXPIRY_RE = re.compile(r"^\d{2}/\d{2}$")


def check_card(card_number: str, expiry: str, today: date) -> None:
    """Raise InvalidPayment unless the card is 16 digits and not yet expired (MM/YY)."""
    if not CARD_NUMBER_RE.match(card_number or ""):
        raise InvalidPayment("Invalid card number")
    if not EXPIRY_RE.match(expiry or ""):
        raise InvalidPayment("Invalid expiry date format")

    month, year = (int(part) for part in expiry.split("/"))
    if month < 1 or month > 12:
        raise InvalidPayment("Invalid month")
    if (year, month) < (today.year % 100, today.month):
        raise InvalidPayment("Expired card")


class BookingLifecycle:
    """PENDING -> CONFIRMED, PENDING/CONFIRMED -> CANCELLED. CANCELLED is terminal."""

    def __init__(self, session, broker, sink):
        self._session = session
        self._broker = broker
        self._sink = sink

    def _lock_booking(self, booking_id: int) -> Booking:
        stmt = (
            select(Booking)
            .where(Booking.id == booking_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        booking = self._session.execute(stmt).scalar_one_or_none()
        if booking is None:
            raise NotFound("Booking not found")
        return booking

    def _record(self, booking, to_status, actor_id, reason=None):
        self._session.add(BookingStatusChange(
            booking=booking,
            from_status=booking.status,
            to_status=to_status,
            actor_user_id=actor_id,
            reason=reason,
        ))
        booking.status = to_status

    # ---------- checkout ----------
    def checkout(self, identity, payload, today=None) -> PaymentInfo:
        if identity is None:
            raise Unauthorized()
        today = today or date.today()

        try:
            booking = self._lock_booking(payload.booking_id)
            if booking.user_id != identity.user_id:
                raise Forbidden("Forbidden: You do not have access to this booking")
            if booking.status == BookingStatus.CONFIRMED.value:
                raise AlreadyProcessed()
            if booking.is_cancelled:
                raise AlreadyCancelled()

            check_card(payload.card_number, payload.expiry_date, today)

            payment = PaymentInfo(
                booking=booking,
                cardholder_name=payload.cardholder_name,
                last_four_digits=payload.card_number[-4:],
                expiry_date=payload.expiry_date,
            )
            self._session.add(payment)
            self._record(booking, BookingStatus.CONFIRMED.value, identity.user_id, "payment")
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("booking %s confirmed", booking.id)
        self._sink.deliver([
            NotificationEvent(
                user_id=booking.user_id,
                booking_id=booking.id,
                type=NotificationType.BOOKING_CONFIRMATION,
                title="Booking Confirmation",
                message=f"Your booking for {booking.id} has been confirmed!",
            )
        ])
        return payment

    # ---------- cancellation ----------
    def cancel(self, identity, booking_id: int, reason=None, message=None) -> Booking:
        """
        Cancel a whole booking. Allowed for the booking's owner and for the
        owner of any hotel one of its room legs points at. Flight legs are left
        alone; see cancel_flight_leg.
        """
        if identity is None:
            raise Unauthorized()

        try:
            booking = self._lock_booking(booking_id)
            is_owner = booking.user_id == identity.user_id
            is_hotel_owner = identity.user_id in booking.hotel_owner_ids()
            if not is_owner and not is_hotel_owner:
                raise Forbidden(
                    "Forbidden: you must be either the booking owner or the hotel owner to cancel this booking"
                )
            if booking.is_cancelled:
                raise AlreadyCancelled()

            booking.cancelled_at = datetime.utcnow()
            self._record(booking, BookingStatus.CANCELLED.value, identity.user_id, reason)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("booking %s cancelled by user %s", booking.id, identity.user_id)
        self._sink.deliver([
            NotificationEvent(
                user_id=booking.user_id,
                booking_id=booking.id,
                type=NotificationType.BOOKING_CANCELLATION,
                title="Booking Cancellation",
                message=message or f"Your booking {booking.id} has been cancelled.",
            )
        ])
        return booking

    def cancel_room_booking(self, identity, room_booking_id: int, hotel_id: int) -> Booking:
        if identity is None:
            raise Unauthorized()

        room_booking = self._session.get(RoomBooking, room_booking_id)
        if room_booking is None:
            raise NotFound("Room booking not found")
        if room_booking.hotel_id != hotel_id:
            raise InvalidRelation("RoomBooking does not belong to the provided hotelId")
        hotel = room_booking.hotel
        if hotel is None or hotel.owner_id != identity.user_id:
            raise Forbidden("user does not have permission to cancel this booking")

        room_type_name = room_booking.room_type.name
        return self.cancel(
            identity,
            room_booking.booking_id,
            reason="cancelled by hotel owner",
            message=(
                f"Your booking for {room_type_name} at {hotel.name} "
                "has been cancelled by the property owner."
            ),
        )

    # ---------- flight legs ----------
    def cancel_flight_leg(self, identity, last_name: str, afs_booking_id: str) -> dict:
        if identity is None:
            raise Unauthorized()

        ref = self._session.execute(
            select(FlightBookingReference).where(FlightBookingReference.afs_booking_id == afs_booking_id)
        ).scalar_one_or_none()
        if ref is None:
            raise NotFound("Flight booking reference not found")

        booking = self._lock_booking(ref.booking_id)
        owner = self._session.get(User, booking.user_id)
        if owner is None or owner.id != identity.user_id or owner.last_name != last_name:
            self._session.rollback()
            raise Forbidden("User does not have access to this flight")
        if ref.cancelled_at is not None:
            self._session.rollback()
            raise AlreadyCancelled("This flight booking has already been cancelled")
        # release the booking lock before talking to the broker
        self._session.commit()

        result = self._broker.cancel_flight(last_name, ref.afs_booking_id)

        ref.cancelled_at = datetime.utcnow()
        self._session.commit()
        logger.info("flight booking %s cancelled for booking %s", ref.afs_booking_id, ref.booking_id)
        return result
