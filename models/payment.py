from datetime import datetime
from models.db import db


class PaymentInfo(db.Model):
    __tablename__ = "payment_infos"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=False, unique=True, index=True)

    # never store the full card number
    cardholder_name = db.Column(db.String(120), nullable=False)
    last_four_digits = db.Column(db.String(4), nullable=False)
    expiry_date = db.Column(db.String(5), nullable=False)  # MM/YY

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    booking = db.relationship("Booking", back_populates="payment_info")

    def to_dict(self):
        return {
            "id": self.id,
            "bookingId": self.booking_id,
            "cardholderName": self.cardholder_name,
            "lastFourDigits": self.last_four_digits,
            "expiryDate": self.expiry_date,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
