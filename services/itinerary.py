import logging
from dataclasses import replace
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from models.booking import Booking, BookingStatus, FlightBookingReference
from models.booking_history import BookingStatusChange
from models.hotel import Hotel
from models.notification import NotificationType
from models.user import User
from services.errors import BookingError, NotFound, NothingToBook, PartialBookingFailure, Unauthorized
from services.flight_broker import Passenger, is_round_trip, validate_passport
from services.notifications import NotificationEvent

logger = logging.getLogger(__name__)


class ItineraryResult:
    def __init__(self, booking, room_quote=None, flight_booking=None):
        self.booking = booking
        self.room_quote = room_quote
        self.flight_booking = flight_booking

    def to_dict(self):
        return {
            "message": "Booking successful!",
            "bookingId": self.booking.id,
            "flight": self.flight_booking.to_dict() if self.flight_booking else None,
            "roomBooking": self.room_quote.to_dict() if self.room_quote else None,
            "totalPrice": float(self.booking.total_price),
        }


class ItineraryOrchestrator:
    """
    Books a room leg, a flight leg or both as one Booking.

    The room leg is checked first (read only), then the flight broker is
    called, and only then is everything written in a single transaction. A
    flight booked at the broker whose transaction later fails is cancelled
    again at the broker.
    """

    def __init__(self, session, ledger, broker, sink):
        self._session = session
        self._ledger = ledger
        self._broker = broker
        self._sink = sink

    def _validate(self, identity, request) -> User:
        if identity is None:
            raise Unauthorized()

        user = self._session.get(User, identity.user_id)
        if user is None:
            raise Unauthorized("The user account could not be found. Please log in again or create an account.")

        if request.room is None and request.flight is None:
            raise NothingToBook()

        if request.room is not None:
            if self._session.get(Hotel, request.room.hotel_id) is None:
                raise NotFound("The selected hotel does not exist.")
            self._ledger.load_room_type(request.room.room_type_id, request.room.hotel_id)

        # passport only after the room leg is known to be well formed
        if request.flight is not None:
            validate_passport(request.flight.passport_number)
        return user

    def book(self, identity, request) -> ItineraryResult:
        user = self._validate(identity, request)

        room_quote = None
        if request.room is not None:
            room_quote = self._ledger.quote(request.room)
        # end the read transaction; no locks are held across the broker call
        self._session.commit()

        flight_booking = None
        if request.flight is not None:
            flight_booking = self._broker.book_flights(
                request.flight.flight_ids,
                Passenger(
                    first_name=user.first_name,
                    last_name=user.last_name,
                    email=user.email,
                    passport_number=request.flight.passport_number,
                ),
            )

        try:
            booking, room_quote = self._persist(user, request, room_quote, flight_booking)
        except Exception:
            if flight_booking is not None:
                self._compensate_flight(user, flight_booking)
            raise

        self._sink.deliver([
            NotificationEvent(
                user_id=booking.user_id,
                booking_id=booking.id,
                type=NotificationType.HOTEL_NEW_BOOKING,
                title="New Booking",
                message=f"Your booking #{booking.id} has been made.",
            )
        ])

        return ItineraryResult(booking, room_quote=room_quote, flight_booking=flight_booking)

    def _persist(self, user, request, room_quote, flight_booking):
        total = Decimal("0")
        if room_quote is not None:
            total += room_quote.total_price
        if flight_booking is not None:
            total += flight_booking.price

        try:
            booking = Booking(
                user_id=user.id,
                total_price=total,
                status=BookingStatus.PENDING.value,
                flight_search_params=request.flight_search_params,
            )
            self._session.add(booking)
            self._session.flush()

            room_booking = None
            if request.room is not None:
                room_booking = self._ledger.reserve(booking, request.room)
                if room_booking.total_price != room_quote.total_price:
                    # price changed between the quote and the lock
                    booking.total_price = total - room_quote.total_price + room_booking.total_price
                    room_quote = replace(
                        room_quote,
                        unit_price=Decimal(room_booking.room_type.price_per_night),
                        total_price=room_booking.total_price,
                    )

            flight_ref = None
            if flight_booking is not None:
                hint = request.flight.round_trip_hint
                flight_ref = FlightBookingReference(
                    booking=booking,
                    afs_booking_id=flight_booking.booking_id,
                    passenger_count=request.flight.passenger_count,
                    total_price=flight_booking.price,
                    is_round_trip=hint if hint is not None else is_round_trip(flight_booking.flights),
                )
                self._session.add(flight_ref)

            self._session.add(BookingStatusChange(
                booking=booking,
                from_status=None,
                to_status=BookingStatus.PENDING.value,
                actor_user_id=user.id,
                reason="created",
            ))
            self._session.flush()

            if (request.room is not None and room_booking is None) or (
                flight_booking is not None and flight_ref is None
            ):
                raise PartialBookingFailure()

            self._session.commit()
        except BookingError:
            self._session.rollback()
            raise
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.exception("itinerary transaction failed for user %s", user.id)
            raise PartialBookingFailure(details=type(exc).__name__) from exc

        logger.info("booking %s created for user %s (%s)", booking.id, user.id, request.kind)
        return booking, room_quote

    def _compensate_flight(self, user, flight_booking):
        try:
            self._broker.cancel_flight(user.last_name, flight_booking.booking_id)
            logger.info("cancelled orphaned flight booking %s", flight_booking.booking_id)
        except BookingError:
            logger.exception(
                "could not cancel orphaned flight booking %s; manual follow-up needed",
                flight_booking.booking_id,
            )
