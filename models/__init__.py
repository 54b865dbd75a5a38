from .db import db
from .user import User
from .session import Session
from .hotel import Hotel, RoomType
from .booking import Booking, BookingStatus, RoomBooking, FlightBookingReference
from .booking_history import BookingStatusChange
from .payment import PaymentInfo
from .notification import Notification, NotificationType
