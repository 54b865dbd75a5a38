import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import func, select

from models.booking import Booking, BookingStatus, RoomBooking
from models.hotel import Hotel, RoomType
from services.errors import InsufficientInventory, InvalidRange, InvalidRelation, NotFound

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def stay_nights(check_in, check_out) -> int:
    """Nights billed for a stay: whole days rounded up, never less than one."""
    seconds = (check_out - check_in).total_seconds()
    return max(1, math.ceil(seconds / ONE_DAY.total_seconds()))


def leg_price(unit_price: Decimal, nights: int, rooms: int) -> Decimal:
    return Decimal(unit_price) * nights * rooms


@dataclass(frozen=True)
class RoomQuote:
    room_type: RoomType
    hotel: Hotel
    check_in: date
    check_out: date
    number_of_rooms: int
    nights: int
    unit_price: Decimal
    total_price: Decimal

    def to_dict(self):
        return {
            "roomType": self.room_type.name,
            "hotel": {"id": self.hotel.id, "name": self.hotel.name},
            "checkIn": self.check_in.isoformat(),
            "checkOut": self.check_out.isoformat(),
            "nights": self.nights,
            "numberOfRooms": self.number_of_rooms,
            "pricePerNight": float(self.unit_price),
            "price": float(self.total_price),
        }


class InventoryLedger:
    """Room availability per room type, and the only place room legs get written."""

    def __init__(self, session):
        self._session = session

    # ---------- reads ----------
    def booked_rooms(self, room_type_id: int, check_in, check_out) -> int:
        """Rooms held by non-cancelled legs overlapping [check_in, check_out)."""
        stmt = (
            select(func.coalesce(func.sum(RoomBooking.number_of_rooms), 0))
            .join(Booking, RoomBooking.booking_id == Booking.id)
            .where(
                RoomBooking.room_type_id == room_type_id,
                Booking.status != BookingStatus.CANCELLED.value,
                # half-open overlap: neither ends before we start nor starts after we end
                RoomBooking.check_out_date > check_in,
                RoomBooking.check_in_date < check_out,
            )
        )
        return int(self._session.execute(stmt).scalar_one())

    def available_rooms(self, room_type: RoomType, check_in, check_out) -> int:
        booked = self.booked_rooms(room_type.id, check_in, check_out)
        return max(0, room_type.total_rooms - booked)

    def load_room_type(self, room_type_id: int, hotel_id: int, lock=False) -> RoomType:
        stmt = select(RoomType).where(RoomType.id == room_type_id)
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        room_type = self._session.execute(stmt).scalar_one_or_none()
        if room_type is None or room_type.hotel is None:
            raise NotFound("Invalid room type.")
        if room_type.hotel_id != hotel_id:
            raise InvalidRelation()
        return room_type

    def quote(self, leg, lock=False) -> RoomQuote:
        """Check a room leg against inventory and price it. Writes nothing."""
        room_type = self.load_room_type(leg.room_type_id, leg.hotel_id, lock=lock)

        if leg.check_in >= leg.check_out:
            raise InvalidRange()

        booked = self.booked_rooms(room_type.id, leg.check_in, leg.check_out)
        if booked + leg.number_of_rooms > room_type.total_rooms:
            logger.info(
                "room type %s full for %s..%s: booked=%s requested=%s total=%s",
                room_type.id, leg.check_in, leg.check_out, booked, leg.number_of_rooms, room_type.total_rooms,
            )
            raise InsufficientInventory()

        nights = stay_nights(leg.check_in, leg.check_out)
        unit_price = Decimal(room_type.price_per_night)
        return RoomQuote(
            room_type=room_type,
            hotel=room_type.hotel,
            check_in=leg.check_in,
            check_out=leg.check_out,
            number_of_rooms=leg.number_of_rooms,
            nights=nights,
            unit_price=unit_price,
            total_price=leg_price(unit_price, nights, leg.number_of_rooms),
        )

    # ---------- write ----------
    def reserve(self, booking: Booking, leg) -> RoomBooking:
        """
        Lock the room type row, re-check the leg and insert it under `booking`.
        Must run inside the caller's write transaction; the caller commits.
        """
        quote = self.quote(leg, lock=True)
        room_booking = RoomBooking(
            booking=booking,
            room_type_id=quote.room_type.id,
            hotel_id=quote.hotel.id,
            check_in_date=leg.check_in,
            check_out_date=leg.check_out,
            guest_count=leg.guest_count,
            number_of_rooms=leg.number_of_rooms,
            total_price=quote.total_price,
        )
        self._session.add(room_booking)
        self._session.flush()
        return room_booking

    # ---------- owner operations ----------
    def availability_report(self, hotel: Hotel, start: date, end: date) -> list:
        if start > end:
            raise InvalidRange("startDate cannot be after endDate")
        if start == end:
            end = start + ONE_DAY

        report = []
        for room_type in hotel.room_types:
            booked = self.booked_rooms(room_type.id, start, end)
            report.append({
                "roomTypeId": room_type.id,
                "roomType": room_type.name,
                "totalRooms": room_type.total_rooms,
                "bookedRooms": booked,
                "availableRooms": max(0, room_type.total_rooms - booked),
            })
        return report

    def update_capacity(self, hotel: Hotel, room_type_id: int, new_total_rooms: int) -> RoomType:
        # Existing bookings stay honored even if they now exceed the new total.
        room_type = self._session.execute(
            select(RoomType).where(RoomType.id == room_type_id, RoomType.hotel_id == hotel.id)
        ).scalar_one_or_none()
        if room_type is None:
            raise NotFound("Room type not found")
        room_type.total_rooms = new_total_rooms
        self._session.commit()
        return room_type
