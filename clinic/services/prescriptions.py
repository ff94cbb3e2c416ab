"""Prescriptions written by a doctor for a completed appointment."""
from __future__ import annotations

import logging
from typing import Optional

from django.db import IntegrityError, transaction

from clinic.exceptions import ConflictError, NotFoundError
from clinic.models import Appointment, Medication, Prescription, User
from clinic.permissions import Actor, can_view_prescription, prescription_scope, require_role
from clinic.services.audit import log_action
from clinic.services.pagination import paginate

logger = logging.getLogger(__name__)


def _with_relations(qs):
    return qs.select_related('doctor', 'appointment', 'appointment__patient', 'appointment__doctor') \
        .prefetch_related('medications')


def _reload(pk: int) -> Prescription:
    return _with_relations(Prescription.objects.filter(pk=pk)).get()


def _replace_medications(prescription: Prescription, medications: list[dict]) -> None:
    prescription.medications.all().delete()
    Medication.objects.bulk_create([Medication(prescription=prescription, **m) for m in medications])


def _owned_for_update(actor: Actor, prescription_id: int) -> Prescription:
    p = Prescription.objects.select_for_update().filter(pk=prescription_id, doctor_id=actor.id).first()
    if not p:
        raise NotFoundError('Prescription not found or you do not have permission to modify it')
    return p


def create_prescription(actor: Actor, data: dict) -> Prescription:
    require_role(actor, User.ROLE_DOCTOR)
    fields = dict(data)
    appointment_id = fields.pop('appointment_id')
    medications = fields.pop('medications')

    try:
        with transaction.atomic():
            appt = Appointment.objects.select_for_update().filter(
                pk=appointment_id,
                doctor_id=actor.id,
                status=Appointment.STATUS_COMPLETED,
            ).first()
            if not appt:
                raise NotFoundError('Appointment not found, not assigned to you, or not completed')
            if Prescription.objects.filter(appointment_id=appt.id).exists():
                raise ConflictError('A prescription already exists for this appointment',
                                    code='PRESCRIPTION_EXISTS')

            p = Prescription.objects.create(appointment=appt, doctor_id=actor.id, **fields)
            _replace_medications(p, medications)
            log_action(actor=actor, action='prescription_create', object_type='prescription', object_id=p.id,
                       detail={'appointmentId': appt.id, 'medications': len(medications)})
    except IntegrityError:
        raise ConflictError('A prescription already exists for this appointment', code='PRESCRIPTION_EXISTS')

    logger.info('Prescription %s written for appointment %s by doctor %s', p.id, appointment_id, actor.id)
    return _reload(p.id)


def update_prescription(actor: Actor, prescription_id: int, data: dict) -> Prescription:
    """Overwrite a prescription; the medication list is replaced wholesale."""
    require_role(actor, User.ROLE_DOCTOR)
    with transaction.atomic():
        p = _owned_for_update(actor, prescription_id)
        p.diagnosis = data['diagnosis']
        p.follow_up_instructions = data['follow_up_instructions']
        p.next_appointment = data.get('next_appointment')
        p.save()
        _replace_medications(p, data['medications'])
        log_action(actor=actor, action='prescription_update', object_type='prescription', object_id=p.id,
                   detail={'medications': len(data['medications'])})
    return _reload(p.id)


def delete_prescription(actor: Actor, prescription_id: int) -> None:
    require_role(actor, User.ROLE_DOCTOR)
    with transaction.atomic():
        p = _owned_for_update(actor, prescription_id)
        appointment_id = p.appointment_id
        p.delete()
        log_action(actor=actor, action='prescription_delete', object_type='prescription', object_id=prescription_id,
                   detail={'appointmentId': appointment_id})
    logger.info('Prescription %s deleted by doctor %s', prescription_id, actor.id)


def get_prescription(actor: Actor, prescription_id: int) -> Prescription:
    p = _with_relations(Prescription.objects.filter(pk=prescription_id)).first()
    if not p or not can_view_prescription(actor, p):
        raise NotFoundError('Prescription not found')
    return p


def list_prescriptions(actor: Actor, *, page: int = 1, limit: Optional[int] = None):
    qs = _with_relations(Prescription.objects.filter(prescription_scope(actor))).order_by('-created_at', '-id')
    return paginate(qs, page, limit)
