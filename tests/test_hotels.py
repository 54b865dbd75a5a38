from datetime import date
from decimal import Decimal

from models import db
from models.hotel import Hotel, RoomType

HOTEL = {
    "name": "Lakeside Inn",
    "address": "10 Shore Rd",
    "city": "Kingston",
    "country": "Canada",
    "location": "44.23,-76.48",
    "starRating": 3,
    "images": ["https://img.example/lake.jpg"],
}


def _room_type_body(hotel_id, **extra):
    body = {
        "hotelId": hotel_id,
        "name": "Queen",
        "pricePerNight": "129.99",
        "totalRooms": 4,
        "amenities": ["wifi", "tv"],
        "images": ["https://img.example/queen.jpg"],
    }
    body.update(extra)
    return body


class TestHotelManagement:
    def test_create_hotel(self, owner_client, owner):
        resp = owner_client.post("/hotel", json=HOTEL)

        assert resp.status_code == 201
        assert resp.get_json()["hotel"]["ownerId"] == owner.id

    def test_star_rating_bounds(self, owner_client):
        resp = owner_client.post("/hotel", json=dict(HOTEL, starRating=6))

        assert resp.status_code == 400

    def test_images_required(self, owner_client):
        resp = owner_client.post("/hotel", json=dict(HOTEL, images=[]))

        assert resp.status_code == 400

    def test_owned_lists_only_mine(self, owner_client, hotel, make_hotel, stranger):
        make_hotel(stranger, name="Not Mine")

        hotels = owner_client.get("/hotel/owned").get_json()["hotels"]

        assert [h["name"] for h in hotels] == ["Harbour View"]

    def test_create_room_type(self, owner_client, hotel):
        resp = owner_client.post("/hotel/room", json=_room_type_body(hotel.id))

        assert resp.status_code == 201
        assert resp.get_json()["roomType"]["pricePerNight"] == 129.99

    def test_room_type_names_are_unique_per_hotel(self, owner_client, hotel, make_hotel, owner):
        owner_client.post("/hotel/room", json=_room_type_body(hotel.id))
        other = make_hotel(owner, name="Second")

        assert owner_client.post("/hotel/room", json=_room_type_body(hotel.id)).status_code == 409
        assert owner_client.post("/hotel/room", json=_room_type_body(other.id)).status_code == 201

    def test_room_type_needs_positive_price(self, owner_client, hotel):
        resp = owner_client.post("/hotel/room", json=_room_type_body(hotel.id, pricePerNight="0"))

        assert resp.status_code == 400

    def test_only_owner_adds_room_types(self, stranger_client, hotel):
        resp = stranger_client.post("/hotel/room", json=_room_type_body(hotel.id))

        assert resp.status_code == 403
        assert db.session.query(RoomType).count() == 0

    def test_list_room_types(self, owner_client, stranger_client, hotel, room_type):
        assert owner_client.get(f"/hotel/{hotel.id}/roomTypes").get_json()["roomTypes"][0]["name"] == "Double"
        assert stranger_client.get(f"/hotel/{hotel.id}/roomTypes").status_code == 403
        assert owner_client.get("/hotel/9999/roomTypes").status_code == 404


class TestAvailabilityEndpoints:
    def test_report(self, owner_client, hotel, room_type, add_room_booking, guest):
        add_room_booking(guest, room_type, date(2030, 3, 10), date(2030, 3, 12))

        resp = owner_client.get(f"/hotel/{hotel.id}/availability?startDate=2030-03-11&endDate=2030-03-11")

        assert resp.status_code == 200
        assert resp.get_json()[0]["availableRooms"] == 1

    def test_report_rejects_reversed_range(self, owner_client, hotel, room_type):
        resp = owner_client.get(f"/hotel/{hotel.id}/availability?startDate=2030-03-12&endDate=2030-03-10")

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "startDate cannot be after endDate"

    def test_report_needs_dates(self, owner_client, hotel):
        assert owner_client.get(f"/hotel/{hotel.id}/availability").status_code == 400

    def test_report_is_owner_only(self, stranger_client, hotel):
        resp = stranger_client.get(f"/hotel/{hotel.id}/availability?startDate=2030-03-10&endDate=2030-03-12")

        assert resp.status_code == 403

    def test_update_capacity(self, owner_client, hotel, room_type):
        resp = owner_client.patch(f"/hotel/{hotel.id}/availability",
                                  json={"roomTypeId": room_type.id, "newTotalRooms": 7})

        assert resp.status_code == 200
        assert db.session.get(RoomType, room_type.id).total_rooms == 7

    def test_capacity_must_be_positive(self, owner_client, hotel, room_type):
        resp = owner_client.patch(f"/hotel/{hotel.id}/availability",
                                  json={"roomTypeId": room_type.id, "newTotalRooms": 0})

        assert resp.status_code == 400

    def test_capacity_is_owner_only(self, stranger_client, hotel, room_type):
        resp = stranger_client.patch(f"/hotel/{hotel.id}/availability",
                                     json={"roomTypeId": room_type.id, "newTotalRooms": 9})

        assert resp.status_code == 403


class TestOwnerBookings:
    def test_filters_by_room_type_and_dates(self, owner_client, hotel, room_type, make_room_type,
                                            add_room_booking, guest):
        suite = make_room_type(hotel, name="Suite")
        march = add_room_booking(guest, room_type, date(2030, 3, 10), date(2030, 3, 12))
        add_room_booking(guest, suite, date(2030, 3, 10), date(2030, 3, 12))
        add_room_booking(guest, room_type, date(2030, 6, 1), date(2030, 6, 3))

        resp = owner_client.get(
            f"/hotel/booking?hotelId={hotel.id}&roomTypeName=Double&startDate=2030-03-01&endDate=2030-03-31"
        )

        assert resp.status_code == 200
        assert [b["id"] for b in resp.get_json()["filteredBookings"]] == [march.id]

    def test_other_hotels_bookings_are_hidden(self, stranger_client, hotel):
        assert stranger_client.get(f"/hotel/booking?hotelId={hotel.id}").status_code == 403


class TestSearch:
    def test_search_by_city_is_public(self, app, hotel, room_type, make_hotel, owner):
        make_hotel(owner, name="Mountain Lodge", city="Banff")

        resp = app.test_client().get("/hotel?city=toron")

        assert resp.status_code == 200
        assert [h["name"] for h in resp.get_json()["hotels"]] == ["Harbour View"]

    def test_dated_search_shows_free_rooms(self, app, hotel, room_type, make_room_type, add_room_booking, guest):
        make_room_type(hotel, name="Suite", total_rooms=1)
        add_room_booking(guest, room_type, date(2030, 3, 10), date(2030, 3, 12), rooms=2)

        resp = app.test_client().get("/hotel?city=Toronto&checkIn=2030-03-11&checkOut=2030-03-13")

        room_types = resp.get_json()["hotels"][0]["roomTypes"]
        assert [(rt["name"], rt["availableRooms"]) for rt in room_types] == [("Suite", 1)]

    def test_fully_booked_hotels_drop_out(self, app, hotel, room_type, add_room_booking, guest):
        add_room_booking(guest, room_type, date(2030, 3, 10), date(2030, 3, 12), rooms=2)

        resp = app.test_client().get("/hotel?checkIn=2030-03-10&checkOut=2030-03-12")

        assert resp.get_json()["hotels"] == []

    def test_dates_come_in_pairs(self, app):
        assert app.test_client().get("/hotel?checkIn=2030-03-10").status_code == 400

    def test_filters_by_star_rating(self, app, hotel, make_hotel, owner):
        budget = make_hotel(owner, name="Budget Stay")
        budget.star_rating = 2
        db.session.commit()

        resp = app.test_client().get("/hotel?starRating=2")

        assert [h["name"] for h in resp.get_json()["hotels"]] == ["Budget Stay"]

    def test_star_rating_filter_bounds(self, app):
        assert app.test_client().get("/hotel?starRating=6").status_code == 400

    def test_price_range_keeps_matching_room_types(self, app, hotel, room_type, make_room_type, make_hotel, owner):
        make_room_type(hotel, name="Suite", price=Decimal("300.00"))
        pricey = make_hotel(owner, name="Palace")
        make_room_type(pricey, name="Royal", price=Decimal("900.00"))

        resp = app.test_client().get("/hotel?minPrice=50&maxPrice=150")

        hotels = resp.get_json()["hotels"]
        assert [h["name"] for h in hotels] == ["Harbour View"]
        assert [rt["name"] for rt in hotels[0]["roomTypes"]] == ["Double"]

    def test_price_range_with_dates(self, app, hotel, room_type, make_room_type, add_room_booking, guest):
        make_room_type(hotel, name="Suite", price=Decimal("300.00"))
        add_room_booking(guest, room_type, date(2030, 3, 10), date(2030, 3, 12), rooms=2)

        resp = app.test_client().get("/hotel?checkIn=2030-03-10&checkOut=2030-03-12&maxPrice=150")

        assert resp.get_json()["hotels"] == []

    def test_min_price_above_max_price(self, app):
        resp = app.test_client().get("/hotel?minPrice=200&maxPrice=100")

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "minPrice cannot be greater than maxPrice"


class TestHotelUpdate:
    def test_owner_updates_some_fields(self, owner_client, hotel):
        resp = owner_client.patch("/hotel", json={"hotelId": hotel.id, "name": "Harbour View II", "starRating": 5})

        assert resp.status_code == 200
        body = resp.get_json()["hotel"]
        assert (body["name"], body["starRating"], body["city"]) == ("Harbour View II", 5, "Toronto")

    def test_star_rating_must_be_in_range(self, owner_client, hotel):
        resp = owner_client.patch("/hotel", json={"hotelId": hotel.id, "starRating": 0})

        assert resp.status_code == 400
        assert "between 1 and 5" in resp.get_json()["error"]
        assert db.session.get(Hotel, hotel.id).star_rating == 4

    def test_add_and_remove_images(self, owner_client, hotel):
        resp = owner_client.patch("/hotel", json={
            "hotelId": hotel.id,
            "addImages": ["https://img.example/pool.jpg", "https://img.example/hotel.jpg"],
            "removeImages": ["https://img.example/hotel.jpg"],
        })

        assert resp.get_json()["hotel"]["images"] == ["https://img.example/pool.jpg"]

    def test_cannot_remove_every_image(self, owner_client, hotel):
        resp = owner_client.patch("/hotel", json={"hotelId": hotel.id, "name": "Renamed",
                                                  "removeImages": ["https://img.example/hotel.jpg"]})

        assert resp.status_code == 400
        assert db.session.get(Hotel, hotel.id).name == "Harbour View"

    def test_required_fields_cannot_be_nulled(self, owner_client, hotel):
        resp = owner_client.patch("/hotel", json={"hotelId": hotel.id, "city": None})

        assert resp.status_code == 400

    def test_only_owner_updates(self, stranger_client, hotel):
        resp = stranger_client.patch("/hotel", json={"hotelId": hotel.id, "name": "Mine Now"})

        assert resp.status_code == 403
        assert db.session.get(Hotel, hotel.id).name == "Harbour View"

    def test_unknown_hotel(self, owner_client):
        assert owner_client.patch("/hotel", json={"hotelId": 9999, "name": "x"}).status_code == 404
