import json
import logging
from flask import request
from models import db
from models.audit_log import AuditLog

logger = logging.getLogger(__name__)

def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    """Persist an audit row for a security or booking event."""
    ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    user_agent = request.headers.get("User-Agent", "")

    row = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip,
        user_agent=user_agent[:255] if user_agent else None,
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
    )
    db.session.add(row)
    db.session.commit()
    logger.info("audit %s user=%s %s=%s", action, user_id, entity or "-", entity_id)

def log_booking_result(action: str, result, user_id, booking_id=None, metadata=None):
    """
    Audit a core booking Result: ACTION on success, ACTION_FAIL with the
    error kind otherwise.
    """
    if result.success:
        entity_id = booking_id
        if entity_id is None and isinstance(result.data, dict):
            entity_id = result.data.get("id")
        log_event(action, user_id=user_id, entity="booking", entity_id=entity_id, metadata=metadata)
        return

    meta = dict(metadata or {})
    meta.update({"kind": result.error.kind.value, "message": result.error.message})
    log_event(f"{action}_FAIL", user_id=user_id, entity="booking", entity_id=booking_id, metadata=meta)
