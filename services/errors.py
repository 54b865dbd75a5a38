class BookingError(Exception):
    """Base class for failures the booking core reports to callers."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        out = {"error": self.message}
        if self.details:
            out["details"] = self.details
        return out


# ---------- 400: caller input ----------
class ClientInputError(BookingError):
    status_code = 400
    default_message = "Invalid request"


class InvalidRange(ClientInputError):
    default_message = "Check-out date must be after check-in date."


class InvalidRelation(ClientInputError):
    default_message = "The selected room type does not belong to the selected hotel."


class NothingToBook(ClientInputError):
    default_message = "At least one flight or room must be selected."


class InvalidPassport(ClientInputError):
    default_message = "Valid passport number required."


class InvalidPayment(ClientInputError):
    default_message = "Invalid payment details"


# ---------- 401 / 403 / 404 ----------
class Unauthorized(BookingError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(BookingError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(BookingError):
    status_code = 404
    default_message = "Not found"


# ---------- 409: state conflicts ----------
class StateConflict(BookingError):
    status_code = 409
    default_message = "Conflicting booking state"


class InsufficientInventory(StateConflict):
    default_message = "Not enough rooms available for the selected dates."


class AlreadyProcessed(StateConflict):
    default_message = "Booking has already been processed"


class AlreadyCancelled(StateConflict):
    default_message = "This booking has already been cancelled"


# ---------- flight broker ----------
class UpstreamFailure(BookingError):
    status_code = 500
    default_message = "Flight booking error."


class BrokerRejected(UpstreamFailure):
    status_code = 400
    default_message = "Flight booking failed."


class InvalidBrokerResponse(UpstreamFailure):
    status_code = 400
    default_message = "Invalid flight booking response."


class BrokerUnavailable(UpstreamFailure):
    status_code = 500
    default_message = "Flight booking service unavailable."


# ---------- 500 ----------
class InternalError(BookingError):
    status_code = 500


class PartialBookingFailure(InternalError):
    default_message = "Required booking components failed to be created"
