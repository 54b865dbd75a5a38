from flask import Blueprint, request, jsonify, g
from sqlalchemy import func, select, update

from models import db
from models.booking import RoomBooking
from models.hotel import Hotel
from models.notification import Notification, NotificationType
from services.errors import Forbidden
from services.schemas import MarkReadPayload, parse_body
from utils.auth_context import login_required

notifications_bp = Blueprint("notifications", __name__, url_prefix="/notifications")


@notifications_bp.get("")
@login_required
def unread_notifications():
    rows = db.session.execute(
        select(Notification)
        .where(Notification.user_id == g.user.id, Notification.is_read.is_(False))
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    ).scalars().all()
    return jsonify(notifications=[n.to_dict() for n in rows]), 200


@notifications_bp.patch("")
@login_required
def mark_read():
    body = parse_body(MarkReadPayload, request.get_json(silent=True))
    wanted = set(body.notification_ids)

    owned = set(db.session.execute(
        select(Notification.id).where(Notification.id.in_(wanted), Notification.user_id == g.user.id)
    ).scalars().all())
    if owned != wanted:
        raise Forbidden("Forbidden: Some notifications do not belong to the user")

    result = db.session.execute(
        update(Notification)
        .where(Notification.id.in_(owned), Notification.user_id == g.user.id)
        .values(is_read=True)
    )
    db.session.commit()
    return jsonify(
        message=f"Marked {result.rowcount} notifications as read",
        updatedCount=result.rowcount,
    ), 200


@notifications_bp.get("/owner")
@login_required
def owner_notifications():
    """New-booking notifications for bookings that touch any hotel the caller owns."""
    page = max(1, request.args.get("page", type=int) or 1)
    limit = request.args.get("limit", type=int) or 20
    limit = max(1, min(limit, 100))

    bookings_at_my_hotels = (
        select(RoomBooking.booking_id)
        .join(Hotel, RoomBooking.hotel_id == Hotel.id)
        .where(Hotel.owner_id == g.user.id)
    )
    where = (
        Notification.type == NotificationType.HOTEL_NEW_BOOKING,
        Notification.booking_id.in_(bookings_at_my_hotels),
    )

    total = db.session.execute(select(func.count(Notification.id)).where(*where)).scalar_one()
    rows = db.session.execute(
        select(Notification)
        .where(*where)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).scalars().all()
    unread = db.session.execute(
        select(func.count(Notification.id)).where(*where, Notification.is_read.is_(False))
    ).scalar_one()

    return jsonify(
        notifications=[n.to_dict() for n in rows],
        pagination={"total": total, "page": page, "limit": limit, "hasMore": page * limit < total},
        unreadCount=unread,
    ), 200
