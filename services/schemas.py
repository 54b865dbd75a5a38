"""Request bodies, parsed once at the HTTP boundary.

Routes validate raw JSON into these models; services only ever see the typed
legs produced here.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from services.errors import ClientInputError, NothingToBook


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


def parse_body(model, data):
    """Validate `data` into `model`, turning pydantic errors into a 400."""
    if not isinstance(data, dict):
        raise ClientInputError("Malformed JSON in request body.")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first["loc"]) or "body"
        raise ClientInputError(f"{field}: {first['msg']}") from exc


# ---------- itinerary ----------
@dataclass(frozen=True)
class RoomLeg:
    room_type_id: int
    hotel_id: int
    check_in: date
    check_out: date
    number_of_rooms: int = 1
    guest_count: int = 1


@dataclass(frozen=True)
class FlightLeg:
    flight_ids: tuple
    passport_number: str
    passenger_count: int = 1
    round_trip_hint: Optional[bool] = None


@dataclass(frozen=True)
class BookingRequest:
    room: Optional[RoomLeg] = None
    flight: Optional[FlightLeg] = None
    flight_search_params: Optional[dict] = None

    @property
    def kind(self) -> str:
        if self.room and self.flight:
            return "both"
        return "room" if self.room else "flight"


class ItineraryPayload(ApiModel):
    room_type_id: Optional[int] = None
    hotel_id: Optional[int] = None
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    number_of_rooms: int = Field(default=1, ge=1)
    guest_count: int = Field(default=1, ge=1)

    flight_ids: list[str] = Field(default_factory=list)
    passport_number: Optional[str] = None
    flight_search_params: Optional[dict] = None

    def to_request(self) -> BookingRequest:
        wants_room = self.room_type_id is not None
        wants_flight = len(self.flight_ids) > 0
        if not wants_room and not wants_flight:
            raise NothingToBook()

        room = None
        if wants_room:
            if self.check_in_date is None or self.check_out_date is None:
                raise ClientInputError("Check-in and check-out dates are required for room bookings.")
            if self.hotel_id is None:
                raise ClientInputError("Hotel ID is required for room bookings.")
            room = RoomLeg(
                room_type_id=self.room_type_id,
                hotel_id=self.hotel_id,
                check_in=self.check_in_date,
                check_out=self.check_out_date,
                number_of_rooms=self.number_of_rooms,
                guest_count=self.guest_count,
            )

        flight = None
        if wants_flight:
            if not self.passport_number:
                raise ClientInputError("Passport number is required for flight bookings.")
            hint = None
            if self.flight_search_params and isinstance(self.flight_search_params.get("isRoundTrip"), bool):
                hint = self.flight_search_params["isRoundTrip"]
            flight = FlightLeg(
                flight_ids=tuple(self.flight_ids),
                passport_number=self.passport_number,
                passenger_count=self.guest_count,
                round_trip_hint=hint,
            )

        return BookingRequest(room=room, flight=flight, flight_search_params=self.flight_search_params)


# ---------- lifecycle ----------
class CheckoutPayload(ApiModel):
    booking_id: int
    cardholder_name: str = Field(min_length=1, max_length=120)
    card_number: str = Field(min_length=1)
    expiry_date: str = Field(min_length=1)


class RoomBookingCancelPayload(ApiModel):
    room_booking_id: int
    hotel_id: int


class FlightCancelPayload(ApiModel):
    last_name: str = Field(min_length=1, max_length=255)
    flight_booking_reference_id: str = Field(min_length=1, max_length=255)


# ---------- inventory ----------
class AvailabilityQuery(ApiModel):
    start_date: date
    end_date: date


class CapacityUpdatePayload(ApiModel):
    room_type_id: int
    new_total_rooms: int = Field(gt=0)


class HotelPayload(ApiModel):
    name: str = Field(min_length=1, max_length=160)
    address: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=120)
    country: str = Field(min_length=1, max_length=120)
    location: str = Field(min_length=1, max_length=255)
    star_rating: int = Field(ge=1, le=5)
    logo: Optional[str] = None
    images: list[str] = Field(min_length=1)


class HotelUpdatePayload(ApiModel):
    """Partial update; only fields present in the body are applied."""

    hotel_id: int
    name: Optional[str] = Field(default=None, min_length=1, max_length=160)
    address: Optional[str] = Field(default=None, min_length=1, max_length=255)
    city: Optional[str] = Field(default=None, min_length=1, max_length=120)
    country: Optional[str] = Field(default=None, min_length=1, max_length=120)
    location: Optional[str] = Field(default=None, min_length=1, max_length=255)
    star_rating: Optional[int] = None
    logo: Optional[str] = None
    images: Optional[list[str]] = Field(default=None, min_length=1)
    add_images: list[str] = Field(default_factory=list)
    remove_images: list[str] = Field(default_factory=list)

    @field_validator("star_rating")
    @classmethod
    def star_rating_in_range(cls, v):
        if v is not None and not 1 <= v <= 5:
            raise ValueError("Invalid star rating. It must be between 1 and 5")
        return v


class RoomTypePayload(ApiModel):
    hotel_id: int
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None
    price_per_night: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    total_rooms: int = Field(gt=0)
    amenities: list[str] = Field(min_length=1)
    images: list[str] = Field(min_length=1)


class HotelSearchQuery(ApiModel):
    city: Optional[str] = None
    country: Optional[str] = None
    name: Optional[str] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    star_rating: Optional[int] = Field(default=None, ge=1, le=5)
    min_price: Optional[Decimal] = Field(default=None, ge=0)
    max_price: Optional[Decimal] = Field(default=None, ge=0)

    def price_matches(self, price) -> bool:
        if self.min_price is not None and price < self.min_price:
            return False
        if self.max_price is not None and price > self.max_price:
            return False
        return True


class OwnerBookingQuery(ApiModel):
    hotel_id: int
    room_type_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# ---------- accounts / notifications ----------
class RegisterPayload(ApiModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(min_length=1, max_length=120)
    last_name: str = Field(min_length=1, max_length=120)
    phone_number: Optional[str] = Field(default=None, max_length=30)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("Invalid email")
        return v.lower()


class LoginPayload(ApiModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class MarkReadPayload(ApiModel):
    notification_ids: list[int] = Field(min_length=1)


class ProfileUpdatePayload(ApiModel):
    password: str = Field(min_length=1)
    new_email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    phone_number: Optional[str] = Field(default=None, max_length=30)
    new_password: Optional[str] = Field(default=None, min_length=8, max_length=128)

    @field_validator("new_email")
    @classmethod
    def normalize_email(cls, v):
        if v is None:
            return v
        if "@" not in v:
            raise ValueError("Invalid email")
        return v.lower()


# ---------- flight search ----------
class FlightSearchQuery(ApiModel):
    source: Optional[str] = None
    destination: Optional[str] = None
    depart_date: Optional[date] = None
    return_date: Optional[date] = None
    max_price: float = Field(default=1000, gt=0)
    max_duration: float = Field(default=720, gt=0)
    preferred_airlines: Optional[str] = None


class AirportQueryPayload(ApiModel):
    query: str = Field(min_length=1, max_length=120)
