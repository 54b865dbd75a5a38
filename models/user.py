from datetime import datetime
from models.db import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(120), nullable=False)
    last_name = db.Column(db.String(120), nullable=False)
    phone_number = db.Column(db.String(30), nullable=True)

    role = db.Column(db.String(20), nullable=False, default="USER")  # USER, ADMIN
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    hotels = db.relationship("Hotel", back_populates="owner")
    bookings = db.relationship("Booking", back_populates="user")

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "phoneNumber": self.phone_number,
            "role": self.role,
        }
