import logging
from typing import Any, Dict, Optional

from clinic.models import ActivityLog, User

logger = logging.getLogger(__name__)


def log_action(*, user: Optional[User], action: str, table_name: Optional[str] = None,
               record_id: Optional[str] = None, detail: Optional[Dict[str, Any]] = None) -> Optional[ActivityLog]:
    """Persist an audit entry. A failed write is logged, never raised."""
    try:
        return ActivityLog.objects.create(
            user=user if isinstance(user, User) else None,
            action=action,
            table_name=table_name,
            record_id=str(record_id) if record_id is not None else None,
            detail=detail or {},
        )
    except Exception:
        logger.exception('Could not record %s on %s/%s', action, table_name, record_id)
        return None
