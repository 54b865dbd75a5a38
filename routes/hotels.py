from flask import Blueprint, request, jsonify, g
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from models import db
from models.booking import Booking, RoomBooking
from models.hotel import Hotel, RoomType
from routes.common import ledger, lifecycle, owned_hotel, parse_query
from services.errors import ClientInputError, InvalidRange
from services.schemas import (
    AvailabilityQuery,
    CapacityUpdatePayload,
    HotelPayload,
    HotelSearchQuery,
    HotelUpdatePayload,
    OwnerBookingQuery,
    RoomBookingCancelPayload,
    RoomTypePayload,
    parse_body,
)
from utils.audit import log_event
from utils.auth_context import login_required

hotels_bp = Blueprint("hotels", __name__, url_prefix="/hotel")


# ---------- OWNERS: manage hotels ----------
@hotels_bp.post("")
@login_required
def create_hotel():
    body = parse_body(HotelPayload, request.get_json(silent=True))

    hotel = Hotel(
        owner_id=g.user.id,
        name=body.name,
        address=body.address,
        city=body.city,
        country=body.country,
        location=body.location,
        star_rating=body.star_rating,
        logo=body.logo,
        images=body.images,
    )
    db.session.add(hotel)
    db.session.commit()

    log_event("HOTEL_CREATE", user_id=g.user.id, entity="hotel", entity_id=hotel.id)
    return jsonify(hotel=hotel.to_dict()), 201


@hotels_bp.patch("")
@login_required
def update_hotel():
    body = parse_body(HotelUpdatePayload, request.get_json(silent=True))
    hotel = owned_hotel(body.hotel_id, g.user.id)

    sent = body.model_fields_set
    changes = {}
    for field in ("name", "address", "city", "country", "location", "star_rating", "logo"):
        if field in sent:
            value = getattr(body, field)
            if value is None and field != "logo":
                raise ClientInputError(f"{field} cannot be null")
            changes[field] = value

    images = list(body.images) if body.images is not None else list(hotel.images or [])
    images += [url for url in body.add_images if url not in images]
    dropped = set(body.remove_images)
    images = [url for url in images if url not in dropped]
    if not images:
        raise ClientInputError("Images must be a non-empty array")

    for field, value in changes.items():
        setattr(hotel, field, value)
    hotel.images = images
    db.session.commit()

    log_event("HOTEL_UPDATE", user_id=g.user.id, entity="hotel", entity_id=hotel.id,
              metadata={"fields": sorted(sent - {"hotel_id"})})
    return jsonify(hotel=hotel.to_dict()), 200


@hotels_bp.get("/owned")
@login_required
def owned_hotels():
    hotels = db.session.execute(
        select(Hotel).where(Hotel.owner_id == g.user.id).order_by(Hotel.id)
    ).scalars().all()
    return jsonify(hotels=[h.to_dict(include_room_types=True) for h in hotels]), 200


@hotels_bp.post("/room")
@login_required
def create_room_type():
    body = parse_body(RoomTypePayload, request.get_json(silent=True))
    hotel = owned_hotel(body.hotel_id, g.user.id)

    room_type = RoomType(
        hotel_id=hotel.id,
        name=body.name,
        description=body.description,
        price_per_night=body.price_per_night,
        total_rooms=body.total_rooms,
        amenities=body.amenities,
        images=body.images,
    )
    db.session.add(room_type)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify(error="A room type with this name already exists for this hotel"), 409

    log_event("ROOM_TYPE_CREATE", user_id=g.user.id, entity="room_type", entity_id=room_type.id,
              metadata={"hotel_id": hotel.id})
    return jsonify(roomType=room_type.to_dict()), 201


@hotels_bp.get("/<int:hotel_id>/roomTypes")
@login_required
def list_room_types(hotel_id: int):
    hotel = owned_hotel(hotel_id, g.user.id)
    return jsonify(roomTypes=[rt.to_dict() for rt in hotel.room_types]), 200


# ---------- OWNERS: availability ----------
@hotels_bp.get("/<int:hotel_id>/availability")
@login_required
def availability(hotel_id: int):
    query = parse_query(AvailabilityQuery)
    hotel = owned_hotel(hotel_id, g.user.id)
    return jsonify(ledger().availability_report(hotel, query.start_date, query.end_date)), 200


@hotels_bp.patch("/<int:hotel_id>/availability")
@login_required
def update_availability(hotel_id: int):
    body = parse_body(CapacityUpdatePayload, request.get_json(silent=True))
    hotel = owned_hotel(hotel_id, g.user.id)

    room_type = ledger().update_capacity(hotel, body.room_type_id, body.new_total_rooms)

    log_event("ROOM_CAPACITY_UPDATE", user_id=g.user.id, entity="room_type", entity_id=room_type.id,
              metadata={"total_rooms": room_type.total_rooms})
    return jsonify(message="Room availability updated successfully"), 200


# ---------- OWNERS: bookings at my hotel ----------
@hotels_bp.get("/booking")
@login_required
def hotel_bookings():
    query = parse_query(OwnerBookingQuery)
    if query.start_date and query.end_date and query.start_date > query.end_date:
        raise InvalidRange("startDate cannot be after endDate")
    hotel = owned_hotel(query.hotel_id, g.user.id)

    legs = select(RoomBooking.booking_id).join(RoomType, RoomBooking.room_type_id == RoomType.id).where(
        RoomBooking.hotel_id == hotel.id
    )
    if query.room_type_name:
        legs = legs.where(RoomType.name == query.room_type_name)
    if query.start_date:
        legs = legs.where(RoomBooking.check_in_date >= query.start_date)
    if query.end_date:
        legs = legs.where(RoomBooking.check_out_date <= query.end_date)

    bookings = db.session.execute(
        select(Booking).where(Booking.id.in_(legs)).order_by(Booking.booking_date.desc())
    ).scalars().all()
    return jsonify(filteredBookings=[b.to_dict() for b in bookings]), 200


@hotels_bp.put("/booking")
@login_required
def cancel_room_booking():
    body = parse_body(RoomBookingCancelPayload, request.get_json(silent=True))

    booking = lifecycle().cancel_room_booking(g.identity, body.room_booking_id, body.hotel_id)

    log_event("BOOKING_CANCEL", user_id=g.user.id, entity="booking", entity_id=booking.id,
              metadata={"room_booking_id": body.room_booking_id, "by": "hotel_owner"})
    return jsonify(message="room booking cancelled", data=booking.to_dict()), 200


# ---------- PUBLIC: search ----------
@hotels_bp.get("")
def search_hotels():
    query = parse_query(HotelSearchQuery)
    dated = query.check_in is not None or query.check_out is not None
    if dated:
        if query.check_in is None or query.check_out is None:
            raise ClientInputError("checkIn and checkOut must be given together")
        if query.check_in >= query.check_out:
            raise InvalidRange()
    if query.min_price is not None and query.max_price is not None and query.min_price > query.max_price:
        raise ClientInputError("minPrice cannot be greater than maxPrice")
    priced = query.min_price is not None or query.max_price is not None

    stmt = select(Hotel).order_by(Hotel.id)
    if query.city:
        stmt = stmt.where(Hotel.city.ilike(f"%{query.city}%"))
    if query.country:
        stmt = stmt.where(Hotel.country.ilike(f"%{query.country}%"))
    if query.name:
        stmt = stmt.where(Hotel.name.ilike(f"%{query.name}%"))
    if query.star_rating is not None:
        stmt = stmt.where(Hotel.star_rating == query.star_rating)
    hotels = db.session.execute(stmt).scalars().all()

    if not dated and not priced:
        return jsonify(hotels=[h.to_dict(include_room_types=True) for h in hotels]), 200

    inventory = ledger()
    results = []
    for hotel in hotels:
        room_types = []
        for rt in hotel.room_types:
            if not query.price_matches(rt.price_per_night):
                continue
            entry = rt.to_dict()
            if dated:
                entry["availableRooms"] = inventory.available_rooms(rt, query.check_in, query.check_out)
                if entry["availableRooms"] == 0:
                    continue
            room_types.append(entry)
        # hotels with nothing left to offer drop out
        if room_types:
            results.append({**hotel.to_dict(), "roomTypes": room_types})
    return jsonify(hotels=results), 200
