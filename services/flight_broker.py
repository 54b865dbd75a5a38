import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx

from services.errors import BookingError, BrokerRejected, BrokerUnavailable, InvalidBrokerResponse, InvalidPassport

logger = logging.getLogger(__name__)

MIN_PASSPORT_LENGTH = 9


@dataclass(frozen=True)
class Passenger:
    first_name: str
    last_name: str
    email: str
    passport_number: str


@dataclass(frozen=True)
class FlightBooking:
    booking_id: str
    price: Decimal
    flights: list = field(default_factory=list)
    raw: dict = field(default_factory=dict)

    def to_dict(self):
        out = dict(self.raw)
        out["bookingId"] = self.booking_id
        out["price"] = float(self.price)
        return out


def validate_passport(passport_number: Optional[str]) -> str:
    if not passport_number or len(passport_number.strip()) < MIN_PASSPORT_LENGTH:
        raise InvalidPassport()
    return passport_number.strip()


def _to_decimal(value) -> Decimal:
    """Parse a broker price; anything not a finite, non-negative amount is a bad response."""
    if isinstance(value, bool):
        raise InvalidBrokerResponse(details=f"unusable price {value!r}")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidBrokerResponse(details=f"unusable price {value!r}") from exc
    if not amount.is_finite() or amount < 0:
        raise InvalidBrokerResponse(details=f"unusable price {value!r}")
    return amount


def sum_segment_prices(flights) -> Decimal:
    """Fallback when the broker omits a total: add up each segment's price."""
    total = Decimal("0")
    for flight in flights or []:
        if isinstance(flight, dict) and flight.get("price") is not None:
            total += _to_decimal(flight["price"])
    return total


def is_round_trip(flights) -> bool:
    """True when the itinerary departs from and returns to the same airport."""
    if not flights or len(flights) < 2:
        return False
    try:
        origin = flights[0]["origin"]["code"]
        destination = flights[-1]["destination"]["code"]
    except (KeyError, TypeError):
        return False
    return bool(origin) and origin == destination


class FlightBrokerClient:
    """Thin client for the external flight booking system."""

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 10.0, transport=None):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, config):
        return cls(
            base_url=config.get("FLIGHT_API_URL", ""),
            api_key=config.get("FLIGHT_API_KEY", ""),
            timeout=config.get("FLIGHT_API_TIMEOUT_SECONDS", 10.0),
        )

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self._base_url,
            timeout=self._timeout,
            headers={"x-api-key": self._api_key},
            transport=self._transport,
            trust_env=False,
        )

    def _request(self, method: str, path: str, label: str = "Flight booking", **kwargs):
        try:
            with self._client() as client:
                resp = client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("flight broker timed out on %s", path)
            raise BrokerUnavailable(f"{label} service timed out.") from exc
        except httpx.HTTPError as exc:
            logger.warning("flight broker unreachable on %s: %s", path, exc)
            raise BrokerUnavailable(f"{label} service unavailable.", details=str(exc)) from exc

        if resp.status_code < 200 or resp.status_code >= 300:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            message = None
            if isinstance(body, dict):
                message = body.get("message") or body.get("error")
            logger.info("flight broker rejected %s with %s: %s", path, resp.status_code, message)
            raise BrokerRejected(f"{label} failed.", details=message or "API request failed")

        try:
            return resp.json()
        except ValueError as exc:
            raise BrokerUnavailable(f"{label} service returned an unreadable response.") from exc

    def _post(self, path: str, payload: dict) -> dict:
        data = self._request("POST", path, json=payload)
        if not isinstance(data, dict):
            raise InvalidBrokerResponse()
        return data

    def book_flights(self, flight_ids, passenger: Passenger) -> FlightBooking:
        passport = validate_passport(passenger.passport_number)
        data = self._post("/bookings", {
            "firstName": passenger.first_name,
            "lastName": passenger.last_name,
            "email": passenger.email,
            "passportNumber": passport,
            "flightIds": list(flight_ids),
        })

        reference = data.get("bookingReference") or data.get("ticketNumber")
        if not reference:
            raise InvalidBrokerResponse()

        flights = data.get("flights") or []
        try:
            if data.get("price") is not None:
                price = _to_decimal(data["price"])
            else:
                price = sum_segment_prices(flights)
        except InvalidBrokerResponse:
            logger.error("flight broker priced booking %s unusably: %r", reference, data.get("price"))
            self._release(passenger.last_name, str(reference))
            raise

        return FlightBooking(booking_id=str(reference), price=price, flights=flights, raw=data)

    def cancel_flight(self, last_name: str, booking_reference: str) -> dict:
        return self._post("/bookings/cancel", {
            "lastName": last_name,
            "bookingReference": booking_reference,
        })

    def _release(self, last_name: str, booking_reference: str) -> None:
        try:
            self.cancel_flight(last_name, booking_reference)
        except BookingError:
            logger.exception("could not release flight booking %s", booking_reference)

    # ---------- search ----------
    def airports(self) -> list:
        data = self._request("GET", "/airports", label="Flight search")
        if not isinstance(data, list):
            raise InvalidBrokerResponse("Invalid flight search response.")
        return [a for a in data if isinstance(a, dict)]

    def cities(self):
        return self._request("GET", "/cities", label="Flight search")

    def search_flights(self, origin: str, destination: str, on_date) -> list:
        data = self._request("GET", "/flights", label="Flight search", params={
            "origin": origin,
            "destination": destination,
            "date": on_date.isoformat(),
        })
        if not isinstance(data, dict):
            raise InvalidBrokerResponse("Invalid flight search response.")
        return [f for f in data.get("results") or [] if isinstance(f, dict)]
