from typing import Optional, Any, Dict
from clinic.models import AuditEvent
from clinic.permissions import Actor


def log_action(*, actor: Optional[Actor], action: str, object_type: Optional[str]=None, object_id: Optional[int]=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    return AuditEvent.objects.create(
        user_id=actor.id if actor else None,
        action=action,
        object_type=object_type, object_id=object_id,
        detail=detail or {},
    )
