import json
import logging
from flask import has_request_context, request

audit_logger = logging.getLogger("tripbooking.audit")


def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    ip = None
    user_agent = None
    if has_request_context():
        ip = request.headers.get("X-Forwarded-For", request.remote_addr)
        user_agent = (request.headers.get("User-Agent") or "")[:255] or None

    audit_logger.info(
        "%s user=%s %s=%s ip=%s ua=%s meta=%s",
        action,
        user_id,
        entity or "-",
        entity_id if entity_id is not None else "-",
        ip,
        user_agent,
        json.dumps(metadata, default=str) if metadata else "{}",
    )
