from flask import Blueprint, request, jsonify, g
from sqlalchemy import select

from models import db
from models.booking import Booking
from routes.common import lifecycle, orchestrator
from services.errors import Forbidden, NotFound
from services.schemas import CheckoutPayload, ItineraryPayload, parse_body
from utils.audit import log_event
from utils.auth_context import login_required

bookings_bp = Blueprint("bookings", __name__, url_prefix="/bookings")


@bookings_bp.post("/itinerary")
@login_required
def create_itinerary():
    booking_request = parse_body(ItineraryPayload, request.get_json(silent=True)).to_request()

    result = orchestrator().book(g.identity, booking_request)

    log_event("BOOKING_CREATE", user_id=g.user.id, entity="booking", entity_id=result.booking.id,
              metadata={"kind": booking_request.kind, "total": result.booking.total_price})
    return jsonify(result.to_dict()), 201


@bookings_bp.post("/checkout")
@login_required
def checkout():
    body = parse_body(CheckoutPayload, request.get_json(silent=True))

    payment = lifecycle().checkout(g.identity, body)

    log_event("BOOKING_CONFIRM", user_id=g.user.id, entity="booking", entity_id=body.booking_id)
    return jsonify(message="Payment successful!", paymentInfo=payment.to_dict()), 200


@bookings_bp.get("")
@login_required
def my_bookings():
    rows = db.session.execute(
        select(Booking).where(Booking.user_id == g.user.id).order_by(Booking.booking_date.desc(), Booking.id.desc())
    ).scalars().all()
    return jsonify(
        success=True,
        count=len(rows),
        bookings=[b.to_dict(include_payment=True) for b in rows],
    ), 200


@bookings_bp.get("/<int:booking_id>")
@login_required
def get_booking(booking_id: int):
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    if booking.user_id != g.user.id:
        raise Forbidden()
    return jsonify(booking.to_dict(include_payment=True)), 200


@bookings_bp.put("/<int:booking_id>")
@login_required
def cancel_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    reason = data.get("reason") if isinstance(data, dict) else None
    if isinstance(reason, str):
        reason = reason.strip()[:255] or None
    else:
        reason = None

    booking = lifecycle().cancel(g.identity, booking_id, reason=reason)

    log_event("BOOKING_CANCEL", user_id=g.user.id, entity="booking", entity_id=booking.id, metadata={"reason": reason})
    return jsonify(booking.to_dict()), 200
