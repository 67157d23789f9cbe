from typing import Optional, Any, Dict

import structlog
from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction

from clinic.models import AuditEvent

User = get_user_model()
logger = structlog.get_logger(__name__)


def log_action(*, user: Optional[User], action: str, object_type: Optional[str]=None, object_id: Optional[int]=None, detail: Optional[Dict[str, Any]]=None) -> Optional[AuditEvent]:
    """Record an audit event.  A failed write is logged and never breaks the caller."""
    try:
        # savepoint so a failed insert leaves an outer transaction usable
        with transaction.atomic():
            return AuditEvent.objects.create(
                user=user if isinstance(user, User) else None,
                action=action,
                object_type=object_type, object_id=object_id,
                detail=detail or {},
            )
    except DatabaseError:
        logger.exception('audit_write_failed', action=action, object_type=object_type, object_id=object_id)
        return None
