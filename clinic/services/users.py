"""Directory of doctors and patients, and self-service account management."""
from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.db.models import Q

from clinic.exceptions import AuthorizationError, NotFoundError, ValidationError
from clinic.models import Appointment, User
from clinic.permissions import Actor, can_view_profile, require_role
from clinic.services.accounts import check_password_strength
from clinic.services.audit import log_action
from clinic.services.pagination import paginate

logger = logging.getLogger(__name__)


def _require_self(actor: Actor, user_id: int, message: str) -> None:
    if actor.id != user_id:
        raise AuthorizationError(message)


def list_doctors(*, specialty: Optional[str] = None, page: int = 1, limit: Optional[int] = None):
    qs = User.objects.filter(role=User.ROLE_DOCTOR, is_active=True)
    if specialty:
        qs = qs.filter(specialty__icontains=specialty.strip())
    return paginate(qs.order_by('name', 'id'), page, limit)


def list_patients(actor: Actor, *, search: Optional[str] = None, page: int = 1, limit: Optional[int] = None):
    require_role(actor, User.ROLE_DOCTOR)
    qs = User.objects.filter(role=User.ROLE_PATIENT, is_active=True)
    if search:
        term = search.strip()
        qs = qs.filter(Q(name__icontains=term) | Q(email__icontains=term))
    return paginate(qs.order_by('name', 'id'), page, limit)


def get_user(actor: Actor, user_id: int) -> User:
    if not can_view_profile(actor, user_id):
        raise AuthorizationError('Access denied')
    user = User.objects.filter(pk=user_id).first()
    if not user:
        raise NotFoundError('User not found')
    return user


def update_profile(actor: Actor, user_id: int, data: dict) -> User:
    _require_self(actor, user_id, 'You can only update your own profile')
    user = User.objects.filter(pk=user_id).first()
    if not user:
        raise NotFoundError('User not found')

    changed = []
    for field in ('name', 'phone', 'specialty'):
        if field in data:
            setattr(user, field, data[field])
            changed.append(field)
    if changed:
        user.save(update_fields=changed + ['updated_at'])
        log_action(actor=actor, action='profile_update', object_type='user', object_id=user.id,
                   detail={'fields': changed})
    return user


def change_password(actor: Actor, user_id: int, current_password: str, new_password: str) -> None:
    _require_self(actor, user_id, 'You can only change your own password')
    user = User.objects.filter(pk=user_id).first()
    if not user:
        raise NotFoundError('User not found')
    if not user.check_password(current_password):
        raise ValidationError('Current password is incorrect', code='INVALID_PASSWORD')
    check_password_strength(new_password, user)

    user.set_password(new_password)
    user.save(update_fields=['password', 'updated_at'])
    log_action(actor=actor, action='password_change', object_type='user', object_id=user.id)
    logger.info('User %s changed their password', user.id)


def delete_account(actor: Actor, user_id: int) -> None:
    """Remove an account that has never booked or handled an appointment."""
    _require_self(actor, user_id, 'You can only delete your own account')
    with transaction.atomic():
        user = User.objects.select_for_update().filter(pk=user_id).first()
        if not user:
            raise NotFoundError('User not found')
        if Appointment.objects.filter(Q(patient_id=user_id) | Q(doctor_id=user_id)).exists():
            raise ValidationError('Cannot delete an account with existing appointments', code='HAS_APPOINTMENTS')
        log_action(actor=actor, action='account_delete', object_type='user', object_id=user_id,
                   detail={'role': user.role})
        user.delete()
    logger.info('Account %s deleted', user_id)
