from typing import Optional, Any, Dict
from django.contrib.auth import get_user_model
from clinical.models import AuditEvent

User = get_user_model()

def log_action(*, user: Optional[User], action: str, object_type: Optional[str]=None, object_id: Optional[int]=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    return AuditEvent.objects.create(
        user=user if isinstance(user, User) and user.pk else None,
        action=action,
        object_type=object_type, object_id=object_id,
        detail=detail or {},
    )

def history_for(object_type: str, object_id: int, *, action: Optional[str]=None) -> list[dict]:
    qs = AuditEvent.objects.filter(object_type=object_type, object_id=object_id)
    if action:
        qs = qs.filter(action=action)
    return [{
        'id': e.id,
        'action': e.action,
        'userId': e.user_id,
        'detail': e.detail,
        'createdAt': e.created_at.isoformat(),
    } for e in qs.order_by('-created_at', '-id')]
