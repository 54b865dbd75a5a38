from flask import current_app, request

from models import db
from models.hotel import Hotel
from services.errors import Forbidden, NotFound
from services.inventory import InventoryLedger
from services.itinerary import ItineraryOrchestrator
from services.lifecycle import BookingLifecycle
from services.notifications import NotificationSink
from services.schemas import parse_body


def flight_broker():
    return current_app.extensions["flight_broker"]


def ledger():
    return InventoryLedger(db.session)


def orchestrator():
    return ItineraryOrchestrator(db.session, ledger(), flight_broker(), NotificationSink(db.session))


def lifecycle():
    return BookingLifecycle(db.session, flight_broker(), NotificationSink(db.session))


def parse_query(model):
    """Validate query string args; blank values count as missing."""
    args = {k: v for k, v in request.args.items() if v != ""}
    return parse_body(model, args)


def owned_hotel(hotel_id: int, user_id: int) -> Hotel:
    hotel = db.session.get(Hotel, hotel_id)
    if hotel is None:
        raise NotFound("Hotel not found")
    if hotel.owner_id != user_id:
        raise Forbidden("User does not have permission to interact with this hotel")
    return hotel
