from datetime import date
from decimal import Decimal

from models import db
from models.booking import Booking, FlightBookingReference, RoomBooking
from models.booking_history import BookingStatusChange
from models.notification import Notification, NotificationType
from services.errors import BrokerRejected, BrokerUnavailable, InvalidBrokerResponse

FLIGHT = {"flightIds": ["FL1", "FL2"], "passportNumber": "AB1234567"}


def _count(model):
    return db.session.query(model).count()


class TestRoomOnly:
    def test_books_and_prices_the_stay(self, guest_client, room_request, guest):
        resp = guest_client.post("/bookings/itinerary", json=room_request(rooms=2))

        assert resp.status_code == 201, resp.get_json()
        body = resp.get_json()
        assert body["message"] == "Booking successful!"
        assert body["flight"] is None
        assert body["roomBooking"]["nights"] == 2
        assert body["roomBooking"]["numberOfRooms"] == 2
        assert body["totalPrice"] == 400.0

        booking = db.session.get(Booking, body["bookingId"])
        assert booking.user_id == guest.id
        assert booking.status == "PENDING"
        assert booking.total_price == Decimal("400.00")
        assert len(booking.room_bookings) == 1
        assert booking.room_bookings[0].total_price == Decimal("400.00")

    def test_creation_is_recorded_in_history(self, guest_client, room_request):
        booking_id = guest_client.post("/bookings/itinerary", json=room_request()).get_json()["bookingId"]

        history = db.session.query(BookingStatusChange).filter_by(booking_id=booking_id).all()
        assert [(h.from_status, h.to_status) for h in history] == [(None, "PENDING")]

    def test_notifies_after_commit(self, guest_client, room_request, guest):
        booking_id = guest_client.post("/bookings/itinerary", json=room_request()).get_json()["bookingId"]

        note = db.session.query(Notification).filter_by(booking_id=booking_id).one()
        assert note.type == NotificationType.HOTEL_NEW_BOOKING
        assert note.user_id == guest.id
        assert note.message == f"Your booking #{booking_id} has been made."

    def test_full_room_type_is_a_conflict(self, guest_client, room_request, room_type, add_room_booking, stranger):
        add_room_booking(stranger, room_type, date(2030, 3, 11), date(2030, 3, 13), rooms=2)

        resp = guest_client.post("/bookings/itinerary", json=room_request())

        assert resp.status_code == 409
        assert resp.get_json()["error"] == "Not enough rooms available for the selected dates."
        assert _count(Booking) == 1

    def test_unknown_hotel(self, guest_client, room_request):
        resp = guest_client.post("/bookings/itinerary", json=room_request(hotelId=4242))

        assert resp.status_code == 404

    def test_room_type_must_belong_to_hotel(self, guest_client, room_request, make_hotel, owner):
        other = make_hotel(owner, name="Elsewhere")

        resp = guest_client.post("/bookings/itinerary", json=room_request(hotelId=other.id))

        assert resp.status_code == 400
        assert "does not belong" in resp.get_json()["error"]

    def test_dates_are_required(self, guest_client, room_request):
        body = room_request()
        del body["checkOutDate"]

        resp = guest_client.post("/bookings/itinerary", json=body)

        assert resp.status_code == 400

    def test_reversed_dates(self, guest_client, room_request):
        resp = guest_client.post("/bookings/itinerary", json=room_request(check_in="2030-03-12", check_out="2030-03-10"))

        assert resp.status_code == 400
        assert _count(Booking) == 0


class TestFlights:
    def test_flight_only(self, guest_client, broker, guest):
        resp = guest_client.post("/bookings/itinerary", json=FLIGHT)

        assert resp.status_code == 201, resp.get_json()
        body = resp.get_json()
        assert body["roomBooking"] is None
        assert body["flight"]["bookingId"] == "AFS00001"
        assert body["totalPrice"] == 250.0

        ref = db.session.query(FlightBookingReference).one()
        assert ref.booking_id == body["bookingId"]
        assert ref.is_round_trip is True
        _, passenger, _ = broker.booked[0]
        assert passenger.last_name == guest.last_name

    def test_round_trip_flag_from_search_params(self, guest_client):
        body = dict(FLIGHT, flightSearchParams={"isRoundTrip": False, "origin": "YYZ"})

        resp = guest_client.post("/bookings/itinerary", json=body)

        assert resp.status_code == 201
        assert db.session.query(FlightBookingReference).one().is_round_trip is False
        booking = db.session.get(Booking, resp.get_json()["bookingId"])
        assert booking.flight_search_params == {"isRoundTrip": False, "origin": "YYZ"}

    def test_room_and_flight_in_one_booking(self, guest_client, room_request):
        resp = guest_client.post("/bookings/itinerary", json=room_request(**FLIGHT))

        assert resp.status_code == 201
        booking = db.session.get(Booking, resp.get_json()["bookingId"])
        assert len(booking.room_bookings) == 1
        assert len(booking.flight_booking_references) == 1
        assert booking.total_price == Decimal("450.00")

    def test_short_passport_is_rejected_before_the_broker(self, guest_client, broker):
        resp = guest_client.post("/bookings/itinerary", json=dict(FLIGHT, passportNumber="AB12"))

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Valid passport number required."
        assert broker.booked == []

    def test_passport_is_required(self, guest_client):
        resp = guest_client.post("/bookings/itinerary", json={"flightIds": ["FL1"]})

        assert resp.status_code == 400

    def test_broker_rejection_writes_nothing(self, guest_client, broker, room_request):
        broker.fail_with = BrokerRejected(details="Flight FL1 is full")

        resp = guest_client.post("/bookings/itinerary", json=room_request(**FLIGHT))

        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Flight booking failed.", "details": "Flight FL1 is full"}
        assert _count(Booking) == 0
        assert _count(RoomBooking) == 0

    def test_broker_outage_writes_nothing(self, guest_client, broker, room_request):
        broker.fail_with = BrokerUnavailable("Flight booking service timed out.")

        resp = guest_client.post("/bookings/itinerary", json=room_request(**FLIGHT))

        assert resp.status_code == 500
        assert _count(Booking) == 0
        assert _count(Notification) == 0

    def test_unpriceable_broker_answer_writes_nothing(self, guest_client, broker, room_request):
        broker.fail_with = InvalidBrokerResponse(details="unusable price 'NaN'")

        resp = guest_client.post("/bookings/itinerary", json=room_request(**FLIGHT))

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid flight booking response."
        assert _count(Booking) == 0
        assert _count(FlightBookingReference) == 0


class TestCompensation:
    def test_room_taken_during_flight_call(self, guest_client, broker, room_request, room_type, add_room_booking,
                                           stranger, guest):
        # another guest grabs the last rooms while the broker call is in flight
        broker.on_book = lambda: add_room_booking(stranger, room_type, date(2030, 3, 10), date(2030, 3, 12), rooms=2)

        resp = guest_client.post("/bookings/itinerary", json=room_request(**FLIGHT))

        assert resp.status_code == 409
        assert _count(Booking) == 1
        assert _count(FlightBookingReference) == 0
        assert broker.cancelled == [(guest.last_name, "AFS00001")]

    def test_duplicate_reference_rolls_back_and_cancels(self, guest_client, broker, guest):
        broker.reference = "AFS-DUP"
        assert guest_client.post("/bookings/itinerary", json=FLIGHT).status_code == 201

        resp = guest_client.post("/bookings/itinerary", json=FLIGHT)

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Required booking components failed to be created"}
        assert _count(Booking) == 1
        assert broker.cancelled == [(guest.last_name, "AFS-DUP")]

    def test_failed_compensation_still_reports_the_conflict(self, guest_client, broker, room_request, room_type,
                                                             add_room_booking, stranger):
        broker.on_book = lambda: add_room_booking(stranger, room_type, date(2030, 3, 10), date(2030, 3, 12), rooms=2)
        broker.cancel_fail_with = BrokerUnavailable()

        resp = guest_client.post("/bookings/itinerary", json=room_request(**FLIGHT))

        assert resp.status_code == 409
        assert broker.cancelled == []


class TestRequestShape:
    def test_nothing_to_book(self, guest_client):
        resp = guest_client.post("/bookings/itinerary", json={"guestCount": 2})

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "At least one flight or room must be selected."

    def test_malformed_body(self, guest_client):
        resp = guest_client.post("/bookings/itinerary", data="not json", content_type="application/json")

        assert resp.status_code == 400

    def test_zero_rooms(self, guest_client, room_request):
        resp = guest_client.post("/bookings/itinerary", json=room_request(rooms=0))

        assert resp.status_code == 400
        assert resp.get_json()["error"].startswith("numberOfRooms")

    def test_requires_login(self, app, room_request):
        resp = app.test_client().post("/bookings/itinerary", json=room_request())

        assert resp.status_code == 401

    def test_duplicate_submissions_make_two_bookings(self, guest_client, room_request):
        first = guest_client.post("/bookings/itinerary", json=room_request())
        second = guest_client.post("/bookings/itinerary", json=room_request())

        assert first.status_code == second.status_code == 201
        assert first.get_json()["bookingId"] != second.get_json()["bookingId"]

    def test_room_leg_errors_come_before_passport_errors(self, guest_client, room_request, make_hotel, owner,
                                                         broker):
        other = make_hotel(owner, name="Elsewhere")
        body = room_request(hotelId=other.id, flightIds=["FL1"], passportNumber="AB12")

        resp = guest_client.post("/bookings/itinerary", json=body)

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "The selected room type does not belong to the selected hotel."
        assert broker.booked == []

    def test_unknown_room_type_comes_before_passport(self, guest_client, room_request):
        resp = guest_client.post("/bookings/itinerary",
                                 json=room_request(roomTypeId=9999, flightIds=["FL1"], passportNumber="AB12"))

        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Invalid room type."
