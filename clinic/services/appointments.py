"""
Appointment lifecycle: booking, assignment, status changes and stats.

Status moves forward only::

    PENDING -> CONFIRMED -> COMPLETED
    PENDING/CONFIRMED -> CANCELLED

COMPLETED and CANCELLED are terminal.  Every write runs inside a
transaction; assignment is a single conditional UPDATE so two doctors
can never both claim the same appointment.
"""
from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from clinic.exceptions import ConflictError, NotFoundError
from clinic.models import Appointment, User
from clinic.permissions import (
    Actor,
    appointment_scope,
    can_cancel_appointment,
    can_view_appointment,
    require_role,
)
from clinic.services.audit import log_action
from clinic.services.pagination import paginate

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    Appointment.STATUS_PENDING: (Appointment.STATUS_CONFIRMED, Appointment.STATUS_CANCELLED),
    Appointment.STATUS_CONFIRMED: (Appointment.STATUS_COMPLETED, Appointment.STATUS_CANCELLED),
    Appointment.STATUS_COMPLETED: (),
    Appointment.STATUS_CANCELLED: (),
}


def can_transition(current: str, new: str) -> bool:
    """Return True if an appointment may move from ``current`` to ``new``."""
    return new in _TRANSITIONS.get(current, ())


def _with_relations(qs):
    return qs.select_related('patient', 'doctor', 'prescription', 'review').prefetch_related(
        'prescription__medications'
    )


def _reload(pk: int) -> Appointment:
    return _with_relations(Appointment.objects.filter(pk=pk)).get()


def match_doctor(specialty: str) -> Optional[User]:
    """Pick the least busy active doctor practising ``specialty``.

    Load is the number of open (pending or confirmed) appointments; ties
    go to the lowest id.  Returns None when no doctor matches.
    """
    return (
        User.objects.filter(role=User.ROLE_DOCTOR, is_active=True, specialty__iexact=specialty.strip())
        .annotate(open_count=Count(
            'doctor_appointments',
            filter=Q(doctor_appointments__status__in=Appointment.OPEN_STATUSES),
        ))
        .order_by('open_count', 'id')
        .first()
    )


def create_appointment(actor: Actor, data: dict) -> Appointment:
    require_role(actor, User.ROLE_PATIENT)
    fields = dict(data)
    phone = fields.pop('phone', None)

    with transaction.atomic():
        if phone:
            User.objects.filter(pk=actor.id).update(phone=phone, updated_at=timezone.now())

        doctor = match_doctor(fields['doctor_specialty']) if settings.APPOINTMENT_AUTO_ASSIGN else None
        appt = Appointment.objects.create(
            patient_id=actor.id,
            doctor=doctor,
            status=Appointment.STATUS_PENDING,
            **fields,
        )
        log_action(actor=actor, action='appointment_create', object_type='appointment', object_id=appt.id,
                   detail={'doctorId': appt.doctor_id})

    logger.info('Appointment %s booked by patient %s (doctor=%s)', appt.id, actor.id, appt.doctor_id)
    return _reload(appt.id)


def claim_appointment(appointment_id: int, doctor_id: int) -> int:
    """Set the doctor on an unassigned pending appointment.

    Returns the number of rows updated. Zero means the row was not claimable.
    """
    return Appointment.objects.filter(
        pk=appointment_id,
        doctor__isnull=True,
        status=Appointment.STATUS_PENDING,
    ).update(doctor_id=doctor_id, status=Appointment.STATUS_CONFIRMED, updated_at=timezone.now())


def assign_appointment(actor: Actor, appointment_id: int) -> Appointment:
    """Claim an unassigned pending appointment and confirm it."""
    require_role(actor, User.ROLE_DOCTOR)
    with transaction.atomic():
        if not claim_appointment(appointment_id, actor.id):
            if not Appointment.objects.filter(pk=appointment_id).exists():
                raise NotFoundError('Appointment not found')
            raise ConflictError('Appointment is already assigned to a doctor or is no longer pending',
                                code='ALREADY_ASSIGNED')
        log_action(actor=actor, action='appointment_assign', object_type='appointment', object_id=appointment_id,
                   detail={'from': Appointment.STATUS_PENDING, 'to': Appointment.STATUS_CONFIRMED})

    logger.info('Appointment %s claimed by doctor %s', appointment_id, actor.id)
    return _reload(appointment_id)


def update_appointment(actor: Actor, appointment_id: int, data: dict) -> Appointment:
    """Change status, notes or priority; claims the appointment if unassigned."""
    require_role(actor, User.ROLE_DOCTOR)
    with transaction.atomic():
        appt = Appointment.objects.select_for_update().filter(pk=appointment_id).first()
        if not appt:
            raise NotFoundError('Appointment not found')
        if appt.is_closed:
            raise ConflictError(f'Appointment is {appt.status.lower()} and can no longer be changed',
                                code='APPOINTMENT_CLOSED')

        old_status = appt.status
        new_status = data.get('status')
        if new_status and new_status != old_status:
            if not can_transition(old_status, new_status):
                raise ConflictError(f'Cannot change status from {old_status} to {new_status}',
                                    code='INVALID_TRANSITION')
            appt.status = new_status
        if 'doctor_notes' in data:
            appt.doctor_notes = data['doctor_notes']
        if data.get('priority'):
            appt.priority = data['priority']
        if appt.doctor_id is None:
            appt.doctor_id = actor.id
        appt.save()

        log_action(actor=actor, action='appointment_update', object_type='appointment', object_id=appt.id,
                   detail={'from': old_status, 'to': appt.status, 'fields': sorted(data.keys())})

    if appt.status != old_status:
        logger.info('Appointment %s moved %s -> %s by doctor %s', appt.id, old_status, appt.status, actor.id)
    return _reload(appt.id)


def cancel_appointment(actor: Actor, appointment_id: int) -> Appointment:
    """Mark an appointment cancelled.  Rows are never deleted."""
    with transaction.atomic():
        appt = Appointment.objects.select_for_update().filter(pk=appointment_id).first()
        if not appt or not can_cancel_appointment(actor, appt):
            raise NotFoundError('Appointment not found or you do not have permission to cancel it')
        if appt.status == Appointment.STATUS_CANCELLED:
            raise ConflictError('Appointment is already cancelled', code='ALREADY_CANCELLED')
        if not can_transition(appt.status, Appointment.STATUS_CANCELLED):
            raise ConflictError(f'Cannot cancel an appointment that is {appt.status.lower()}',
                                code='INVALID_TRANSITION')
        old_status = appt.status
        appt.status = Appointment.STATUS_CANCELLED
        appt.save(update_fields=['status', 'updated_at'])
        log_action(actor=actor, action='appointment_cancel', object_type='appointment', object_id=appt.id,
                   detail={'from': old_status, 'to': appt.status})

    logger.info('Appointment %s cancelled by %s %s', appt.id, actor.role.lower(), actor.id)
    return _reload(appt.id)


def get_appointment(actor: Actor, appointment_id: int) -> Appointment:
    appt = _with_relations(Appointment.objects.filter(pk=appointment_id)).first()
    if not appt or not can_view_appointment(actor, appt):
        raise NotFoundError('Appointment not found')
    return appt


def list_appointments(actor: Actor, *, status: Optional[str] = None, page: int = 1, limit: Optional[int] = None):
    qs = Appointment.objects.filter(appointment_scope(actor))
    if status and status != 'all':
        qs = qs.filter(status=status)
    qs = _with_relations(qs).order_by('date', 'id')
    return paginate(qs, page, limit)


def today_window(now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Local midnight-to-midnight bounds of the current calendar day."""
    today = timezone.localdate(now)
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(today, time.min), tz)
    end = timezone.make_aware(datetime.combine(today + timedelta(days=1), time.min), tz)
    return start, end


def dashboard_stats(actor: Actor) -> dict:
    start, end = today_window()
    counts = Appointment.objects.filter(appointment_scope(actor)).aggregate(
        total=Count('id'),
        pending=Count('id', filter=Q(status=Appointment.STATUS_PENDING)),
        confirmed=Count('id', filter=Q(status=Appointment.STATUS_CONFIRMED)),
        completed=Count('id', filter=Q(status=Appointment.STATUS_COMPLETED)),
        cancelled=Count('id', filter=Q(status=Appointment.STATUS_CANCELLED)),
        today=Count('id', filter=Q(date__gte=start, date__lt=end)),
    )
    return counts
