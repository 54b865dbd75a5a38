import enum
from datetime import datetime
from models.db import db


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    total_price = db.Column(db.Numeric(12, 2), nullable=False)

    status = db.Column(db.String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    # status values: PENDING, CONFIRMED, CANCELLED (CANCELLED is terminal)

    booking_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    # informational only, echoed back to the client
    flight_search_params = db.Column(db.JSON, nullable=True)

    user = db.relationship("User", back_populates="bookings")
    room_bookings = db.relationship("RoomBooking", back_populates="booking", order_by="RoomBooking.id")
    flight_booking_references = db.relationship(
        "FlightBookingReference", back_populates="booking", order_by="FlightBookingReference.id"
    )
    payment_info = db.relationship("PaymentInfo", back_populates="booking", uselist=False)
    status_changes = db.relationship(
        "BookingStatusChange", back_populates="booking", order_by="BookingStatusChange.id"
    )

    __table_args__ = (
        db.CheckConstraint("status IN ('PENDING', 'CONFIRMED', 'CANCELLED')", name="ck_bookings_status"),
    )

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED.value

    def hotel_owner_ids(self) -> set:
        return {rb.hotel.owner_id for rb in self.room_bookings if rb.hotel is not None}

    def to_dict(self, include_payment=False):
        out = {
            "id": self.id,
            "userId": self.user_id,
            "status": self.status,
            "totalPrice": float(self.total_price),
            "bookingDate": self.booking_date.isoformat(),
            "cancelledAt": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "flightSearchParams": self.flight_search_params,
            "roomBookings": [rb.to_dict() for rb in self.room_bookings],
            "flightBookingReferences": [fr.to_dict() for fr in self.flight_booking_references],
        }
        if include_payment:
            out["paymentInfo"] = self.payment_info.to_dict() if self.payment_info else None
        return out


class RoomBooking(db.Model):
    __tablename__ = "room_bookings"

    id = db.Column(db.Integer, primary_key=True)

    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=False, index=True)
    room_type_id = db.Column(db.Integer, db.ForeignKey("room_types.id"), nullable=False)
    # denormalized from room_types for ownership checks
    hotel_id = db.Column(db.Integer, db.ForeignKey("hotels.id"), nullable=False, index=True)

    check_in_date = db.Column(db.Date, nullable=False)
    check_out_date = db.Column(db.Date, nullable=False)
    guest_count = db.Column(db.Integer, nullable=False, default=1)
    number_of_rooms = db.Column(db.Integer, nullable=False, default=1)
    total_price = db.Column(db.Numeric(12, 2), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    booking = db.relationship("Booking", back_populates="room_bookings")
    room_type = db.relationship("RoomType", back_populates="room_bookings")
    hotel = db.relationship("Hotel")

    __table_args__ = (
        db.CheckConstraint("check_in_date < check_out_date", name="ck_room_bookings_date_order"),
        db.CheckConstraint("guest_count >= 1", name="ck_room_bookings_guest_count"),
        db.CheckConstraint("number_of_rooms >= 1", name="ck_room_bookings_number_of_rooms"),
        db.Index("ix_room_bookings_room_type_dates", "room_type_id", "check_in_date", "check_out_date"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "bookingId": self.booking_id,
            "roomTypeId": self.room_type_id,
            "roomType": self.room_type.name if self.room_type else None,
            "hotelId": self.hotel_id,
            "hotelName": self.hotel.name if self.hotel else None,
            "checkInDate": self.check_in_date.isoformat(),
            "checkOutDate": self.check_out_date.isoformat(),
            "guestCount": self.guest_count,
            "numberOfRooms": self.number_of_rooms,
            "totalPrice": float(self.total_price),
        }


class FlightBookingReference(db.Model):
    __tablename__ = "flight_booking_references"

    id = db.Column(db.Integer, primary_key=True)

    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=False, index=True)
    # identifier issued by the external flight system
    afs_booking_id = db.Column(db.String(255), nullable=False, unique=True, index=True)

    passenger_count = db.Column(db.Integer, nullable=False, default=1)
    total_price = db.Column(db.Numeric(12, 2), nullable=False)
    is_round_trip = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    booking = db.relationship("Booking", back_populates="flight_booking_references")

    def to_dict(self):
        return {
            "id": self.id,
            "bookingId": self.booking_id,
            "afsBookingId": self.afs_booking_id,
            "passengerCount": self.passenger_count,
            "totalPrice": float(self.total_price),
            "isRoundTrip": self.is_round_trip,
            "cancelledAt": self.cancelled_at.isoformat() if self.cancelled_at else None,
        }
