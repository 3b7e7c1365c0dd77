import uuid, json
from sqlalchemy.orm import Session
from reservations.models.audit_log import AuditLog

def log_audit(db: Session, actor: str, action: str, entity_type: str, entity_id: str, details: dict | None = None) -> AuditLog:
    """Stage an audit row in the caller's transaction; the caller commits."""
    row = AuditLog(
        id=str(uuid.uuid4()),
        actor=actor or "system",
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details_json=json.dumps(details or {}, ensure_ascii=False, default=str),
    )
    db.add(row)
    return row

def list_audit(db: Session, entity_type: str, entity_id: str) -> list[AuditLog]:
    return (
        db.query(AuditLog)
        .filter(AuditLog.entity_type == entity_type, AuditLog.entity_id == entity_id)
        .order_by(AuditLog.created_at.asc())
        .all()
    )
