from datetime import datetime
from models.db import db


class Hotel(db.Model):
    __tablename__ = "hotels"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(160), nullable=False)
    address = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(120), nullable=False, index=True)
    country = db.Column(db.String(120), nullable=False, index=True)
    location = db.Column(db.String(255), nullable=False)
    star_rating = db.Column(db.Integer, nullable=False)

    logo = db.Column(db.String(255), nullable=True)
    images = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    owner = db.relationship("User", back_populates="hotels")
    room_types = db.relationship("RoomType", back_populates="hotel", order_by="RoomType.id")

    __table_args__ = (
        db.CheckConstraint("star_rating BETWEEN 1 AND 5", name="ck_hotels_star_rating"),
    )

    def to_dict(self, include_room_types=False):
        out = {
            "id": self.id,
            "ownerId": self.owner_id,
            "name": self.name,
            "address": self.address,
            "city": self.city,
            "country": self.country,
            "location": self.location,
            "starRating": self.star_rating,
            "logo": self.logo,
            "images": list(self.images or []),
        }
        if include_room_types:
            out["roomTypes"] = [rt.to_dict() for rt in self.room_types]
        return out


class RoomType(db.Model):
    __tablename__ = "room_types"

    id = db.Column(db.Integer, primary_key=True)
    hotel_id = db.Column(db.Integer, db.ForeignKey("hotels.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price_per_night = db.Column(db.Numeric(10, 2), nullable=False)
    total_rooms = db.Column(db.Integer, nullable=False)

    amenities = db.Column(db.JSON, nullable=False, default=list)
    images = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    hotel = db.relationship("Hotel", back_populates="room_types")
    room_bookings = db.relationship("RoomBooking", back_populates="room_type")

    __table_args__ = (
        # Names identify room types to guests, so they must be unique per hotel
        db.UniqueConstraint("hotel_id", "name", name="uq_room_types_hotel_name"),
        db.CheckConstraint("price_per_night > 0", name="ck_room_types_price_positive"),
        db.CheckConstraint("total_rooms > 0", name="ck_room_types_total_rooms_positive"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "hotelId": self.hotel_id,
            "name": self.name,
            "description": self.description,
            "pricePerNight": float(self.price_per_night),
            "totalRooms": self.total_rooms,
            "amenities": list(self.amenities or []),
            "images": list(self.images or []),
        }
