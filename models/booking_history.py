from datetime import datetime
from models.db import db


class BookingStatusChange(db.Model):
    """One row per lifecycle transition of a booking, written with the transition itself."""

    __tablename__ = "booking_status_changes"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=False, index=True)

    from_status = db.Column(db.String(20), nullable=True)  # null for the creation row
    to_status = db.Column(db.String(20), nullable=False)
    actor_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    reason = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    booking = db.relationship("Booking", back_populates="status_changes")
