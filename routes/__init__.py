from .health import health_bp
from .auth import auth_bp
from .hotels import hotels_bp
from .bookings import bookings_bp
from .flights import flights_bp, cities_bp
from .notifications import notifications_bp
