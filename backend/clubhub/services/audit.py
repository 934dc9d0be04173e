import logging

import sqlalchemy as sa
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_INSERT = sa.text("""
    INSERT INTO audit_log (actor_user_id, entity_type, entity_id, action, data)
    VALUES (:actor, :entity_type, :entity_id, :action, :data)
""").bindparams(sa.bindparam("data", type_=sa.JSON))


def audit(db: Session, actor_user_id, entity_type: str, entity_id, action: str, data: dict | None = None):
    db.execute(_INSERT, {
        "actor": actor_user_id,
        "entity_type": entity_type,
        "entity_id": str(entity_id),
        "action": action,
        "data": data or {},
    })
    logger.info("audit %s %s:%s by user=%s", action, entity_type, entity_id, actor_user_id)
