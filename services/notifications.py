import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from models.notification import Notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationEvent:
    user_id: int
    type: str
    title: str
    message: str
    booking_id: Optional[int] = None


class NotificationSink:
    """
    Persists notification events once the booking transaction that produced
    them has committed. Delivery problems are logged and never undo a booking.
    """

    def __init__(self, session):
        self._session = session

    def deliver(self, events) -> int:
        events = [e for e in events if e is not None]
        if not events:
            return 0
        try:
            for event in events:
                self._session.add(Notification(
                    user_id=event.user_id,
                    booking_id=event.booking_id,
                    type=event.type,
                    title=event.title,
                    message=event.message,
                ))
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            logger.exception("failed to store %d notification(s)", len(events))
            return 0
        return len(events)
