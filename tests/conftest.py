from decimal import Decimal

import pytest

from app import create_app
from config import Config
from models import db
from models.booking import Booking, BookingStatus, RoomBooking
from models.hotel import Hotel, RoomType
from models.user import User
from security.password import hash_password
from services.flight_broker import FlightBooking, validate_passport

PASSWORD = "correct-horse-1"


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    BCRYPT_ROUNDS = 4
    FLIGHT_API_URL = "http://flights.test/api"
    FLIGHT_API_KEY = "test-key"


class FakeFlightBroker:
    """Stands in for FlightBrokerClient; records calls and can be told to fail."""

    def __init__(self):
        self.booked = []
        self.cancelled = []
        self.fail_with = None
        self.cancel_fail_with = None
        self.on_book = None
        self.reference = None
        self.price = Decimal("250.00")
        self.flights = [
            {"id": "FL1", "origin": {"code": "YYZ"}, "destination": {"code": "JFK"}, "price": 125},
            {"id": "FL2", "origin": {"code": "JFK"}, "destination": {"code": "YYZ"}, "price": 125},
        ]

    def book_flights(self, flight_ids, passenger):
        validate_passport(passenger.passport_number)
        if self.fail_with is not None:
            raise self.fail_with
        if self.on_book is not None:
            self.on_book()
        reference = self.reference or f"AFS{len(self.booked) + 1:05d}"
        self.booked.append((tuple(flight_ids), passenger, reference))
        return FlightBooking(
            booking_id=reference,
            price=self.price,
            flights=self.flights,
            raw={"bookingReference": reference, "flights": self.flights},
        )

    def cancel_flight(self, last_name, booking_reference):
        if self.cancel_fail_with is not None:
            raise self.cancel_fail_with
        self.cancelled.append((last_name, booking_reference))
        return {"bookingReference": booking_reference, "status": "CANCELLED"}


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    app.extensions["flight_broker"] = FakeFlightBroker()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def broker(app):
    return app.extensions["flight_broker"]


@pytest.fixture
def make_user(app):
    def _factory(email, first_name="Test", last_name="User"):
        user = User(
            email=email,
            password_hash=hash_password(PASSWORD),
            first_name=first_name,
            last_name=last_name,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _factory


@pytest.fixture
def login(app):
    """Returns a fresh test client holding a session cookie for `user`.

    The client echoes the csrf cookie in the header on every request, as the
    frontend does.
    """

    def _login(user):
        client = app.test_client()
        resp = client.post("/accounts/login", json={"email": user.email, "password": PASSWORD})
        assert resp.status_code == 200, resp.get_json()
        token = client.get_cookie(app.config["CSRF_COOKIE_NAME"]).value
        client.environ_base["HTTP_X_CSRF_TOKEN"] = token
        return client

    return _login


@pytest.fixture
def owner(make_user):
    return make_user("owner@example.com", "Olivia", "Owner")


@pytest.fixture
def guest(make_user):
    return make_user("guest@example.com", "Gus", "Traveller")


@pytest.fixture
def stranger(make_user):
    return make_user("stranger@example.com", "Sam", "Stranger")


@pytest.fixture
def owner_client(login, owner):
    return login(owner)


@pytest.fixture
def guest_client(login, guest):
    return login(guest)


@pytest.fixture
def stranger_client(login, stranger):
    return login(stranger)


@pytest.fixture
def make_hotel(app):
    def _factory(owner, name="Harbour View", city="Toronto", country="Canada"):
        hotel = Hotel(
            owner_id=owner.id,
            name=name,
            address="1 Front St",
            city=city,
            country=country,
            location="43.64,-79.38",
            star_rating=4,
            images=["https://img.example/hotel.jpg"],
        )
        db.session.add(hotel)
        db.session.commit()
        return hotel

    return _factory


@pytest.fixture
def make_room_type(app):
    def _factory(hotel, name="Double", price=Decimal("100.00"), total_rooms=2):
        room_type = RoomType(
            hotel_id=hotel.id,
            name=name,
            price_per_night=price,
            total_rooms=total_rooms,
            amenities=["wifi"],
            images=["https://img.example/room.jpg"],
        )
        db.session.add(room_type)
        db.session.commit()
        return room_type

    return _factory


@pytest.fixture
def hotel(make_hotel, owner):
    return make_hotel(owner)


@pytest.fixture
def room_type(make_room_type, hotel):
    return make_room_type(hotel)


@pytest.fixture
def add_room_booking(app):
    """Writes a booking with one room leg straight to the database."""

    def _factory(user, room_type, check_in, check_out, rooms=1, status=BookingStatus.PENDING):
        booking = Booking(user_id=user.id, total_price=Decimal("1.00"), status=status.value)
        db.session.add(booking)
        db.session.add(RoomBooking(
            booking=booking,
            room_type_id=room_type.id,
            hotel_id=room_type.hotel_id,
            check_in_date=check_in,
            check_out_date=check_out,
            number_of_rooms=rooms,
            total_price=Decimal("1.00"),
        ))
        db.session.commit()
        return booking

    return _factory


@pytest.fixture
def room_request(hotel, room_type):
    def _body(check_in="2030-03-10", check_out="2030-03-12", rooms=1, **extra):
        body = {
            "hotelId": hotel.id,
            "roomTypeId": room_type.id,
            "checkInDate": check_in,
            "checkOutDate": check_out,
            "numberOfRooms": rooms,
        }
        body.update(extra)
        return body

    return _body

