"""Flight search on top of the broker: resolve airports, then pick the best
outbound and return flight for the traveller's preferences."""
import logging
from dataclasses import dataclass, field

from services.errors import ClientInputError, InvalidRange, NotFound

logger = logging.getLogger(__name__)

SUGGESTION_LIMIT = 5
REQUIRED_PARAMS = ["source", "destination"]
OPTIONAL_PARAMS = ["departDate", "returnDate", "maxPrice", "maxDuration", "preferredAirlines"]


@dataclass(frozen=True)
class FlightPreferences:
    max_price: float = 1000
    max_duration: float = 720  # minutes
    preferred_airlines: list = field(default_factory=list)

    @classmethod
    def from_query(cls, query):
        airlines = [a.strip() for a in (query.preferred_airlines or "").split(",") if a.strip()]
        return cls(max_price=query.max_price, max_duration=query.max_duration, preferred_airlines=airlines)

    def to_dict(self):
        return {
            "maxPrice": self.max_price,
            "maxDuration": self.max_duration,
            "preferredAirlines": list(self.preferred_airlines),
        }


def _number(value, default=0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def score_flight(flight: dict, prefs: FlightPreferences) -> float:
    """Higher is better: cheap, short, few stops, seats left, preferred airline."""
    price = _number(flight.get("price"), float("inf"))
    duration = _number(flight.get("duration"), float("inf"))
    stops = _number(flight.get("stops"))
    seats = _number(flight.get("availableSeats"))

    score = 0.0
    if price <= prefs.max_price:
        score += (prefs.max_price - price) / prefs.max_price * 30
    if duration <= prefs.max_duration:
        score += (prefs.max_duration - duration) / prefs.max_duration * 25
    score += max(0.0, (3 - stops) * 15)
    score += min(seats / 10, 15)
    if flight.get("airline") in prefs.preferred_airlines:
        score += 15
    return score


def select_best_flight(flights, prefs: FlightPreferences):
    if not flights:
        return None
    if len(flights) == 1:
        return flights[0]
    # max() keeps the first of equally scored flights
    return max(flights, key=lambda f: score_flight(f, prefs))


def find_airport(airports, term: str):
    """Exact, case-insensitive match on code, city or airport name."""
    needle = term.strip().lower()
    for airport in airports:
        for key in ("code", "city", "name"):
            if str(airport.get(key) or "").lower() == needle:
                return airport
    return None


def match_airports(airports, query: str, limit: int = SUGGESTION_LIMIT) -> list:
    needle = query.strip().lower()
    hits = [
        a for a in airports
        if any(needle in str(a.get(key) or "").lower() for key in ("city", "name", "code"))
    ]
    return hits[:limit]


class FlightSearch:
    def __init__(self, broker):
        self._broker = broker

    def search(self, query) -> dict:
        if not query.source or not query.destination:
            raise ClientInputError(
                "Source and destination are required.",
                details={"requiredParams": REQUIRED_PARAMS, "optionalParams": OPTIONAL_PARAMS},
            )
        if query.depart_date and query.return_date and query.return_date < query.depart_date:
            raise InvalidRange("returnDate cannot be before departDate")

        prefs = FlightPreferences.from_query(query)
        airports = self._broker.airports()
        source = find_airport(airports, query.source)
        destination = find_airport(airports, query.destination)
        if source is None or destination is None:
            raise NotFound("No matching airports found", details={"suggestedAirports": airports[:SUGGESTION_LIMIT]})

        outbound, inbound = [], []
        if query.depart_date:
            outbound = self._broker.search_flights(source["code"], destination["code"], query.depart_date)
            if query.return_date:
                inbound = self._broker.search_flights(destination["code"], source["code"], query.return_date)
        logger.info(
            "flight search %s->%s: %d outbound, %d return candidates",
            source["code"], destination["code"], len(outbound), len(inbound),
        )

        return {
            "bestOutboundFlight": select_best_flight(outbound, prefs),
            "bestReturnFlight": select_best_flight(inbound, prefs),
            "isRoundTrip": query.return_date is not None,
            "userPreferences": prefs.to_dict(),
            "airports": {"source": source, "destination": destination},
        }

    def autocomplete(self, query: str) -> list:
        return match_airports(self._broker.airports(), query)
