import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from rest_framework.exceptions import ValidationError as DRFValidation

from clinical.services.audit import log_action
from clinical.services.outcomes import Outcome

User = get_user_model()
logger = logging.getLogger(__name__)


def format_user(u: User) -> dict:
    return {
        'id': u.id,
        'username': u.username,
        'email': u.email,
        'firstName': u.first_name,
        'lastName': u.last_name,
        'name': u.display_name,
        'role': u.role,
        'phoneNumber': u.phone_number,
        'isActive': u.is_active,
        'createdAt': u.date_joined.isoformat() if u.date_joined else None,
        'lastLoginAt': u.last_login.isoformat() if u.last_login else None,
    }


def list_users(role: Optional[str] = None) -> list[User]:
    qs = User.objects.filter(is_active=True)
    if role:
        qs = qs.filter(role=role)
    return list(qs.order_by('last_name', 'first_name', 'id'))


def get_active_user(user_id: int) -> Optional[User]:
    return User.objects.filter(pk=user_id, is_active=True).first()


def create_user(*, username, email, password, first_name, last_name, role, phone_number='', actor=None) -> User:
    if User.objects.filter(username__iexact=username).exists():
        raise DRFValidation({'username': ['Username already exists']})
    if email and User.objects.filter(email__iexact=email).exists():
        raise DRFValidation({'email': ['Email already exists']})
    try:
        validate_password(password)
    except ValidationError as e:
        raise DRFValidation({'password': e.messages})
    user = User.objects.create_user(
        username=username, email=email, password=password,
        first_name=first_name, last_name=last_name,
        role=role, phone_number=phone_number or '',
    )
    log_action(user=actor, action='user_create', object_type='user', object_id=user.id, detail={'role': role})
    logger.info("Created %s account %s (%s)", role, user.id, username)
    return user


def update_user(user_id: int, data: dict, *, actor=None) -> Outcome:
    user = get_active_user(user_id)
    if user is None:
        return Outcome.missing('user not found')
    for field in ('first_name', 'last_name', 'phone_number', 'is_active'):
        if data.get(field) is not None:
            setattr(user, field, data[field])
    user.save()
    log_action(user=actor, action='user_update', object_type='user', object_id=user.id)
    return Outcome.success(user)


def deactivate_user(user_id: int, *, actor=None) -> Outcome:
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        return Outcome.missing('user not found')
    if not user.is_active:
        return Outcome.unchanged(user, 'user is already inactive')
    user.is_active = False
    user.save(update_fields=['is_active', 'last_updated_at'])
    log_action(user=actor, action='user_deactivate', object_type='user', object_id=user.id)
    return Outcome.success(user)
