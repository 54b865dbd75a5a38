from flask import Blueprint, request, jsonify, g

from routes.common import flight_broker, lifecycle, parse_query
from services.flight_search import FlightSearch
from services.schemas import AirportQueryPayload, FlightCancelPayload, FlightSearchQuery, parse_body
from utils.audit import log_event
from utils.auth_context import login_required

flights_bp = Blueprint("flights", __name__, url_prefix="/flights")
cities_bp = Blueprint("cities", __name__, url_prefix="/cities")


# ---------- PUBLIC: search ----------
@flights_bp.get("")
def search_flights():
    query = parse_query(FlightSearchQuery)
    return jsonify(FlightSearch(flight_broker()).search(query)), 200


@flights_bp.post("")
def autocomplete_airports():
    body = parse_body(AirportQueryPayload, request.get_json(silent=True))
    return jsonify(airports=FlightSearch(flight_broker()).autocomplete(body.query)), 200


@cities_bp.get("")
def list_cities():
    return jsonify(flight_broker().cities()), 200


# ---------- USERS: cancel a flight leg ----------
@flights_bp.post("/cancel")
@login_required
def cancel_flight():
    body = parse_body(FlightCancelPayload, request.get_json(silent=True))

    result = lifecycle().cancel_flight_leg(g.identity, body.last_name, body.flight_booking_reference_id)

    log_event("FLIGHT_CANCEL", user_id=g.user.id, entity="flight_booking_reference",
              entity_id=body.flight_booking_reference_id)
    return jsonify(result), 200
