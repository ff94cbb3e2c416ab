"""Patient reviews of completed appointments, and per-doctor rating stats."""
from __future__ import annotations

import logging
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, Q

from clinic.exceptions import ConflictError, NotFoundError
from clinic.models import Appointment, Review, User
from clinic.permissions import Actor, can_view_review, require_role, review_scope
from clinic.services.audit import log_action
from clinic.services.pagination import paginate

logger = logging.getLogger(__name__)

RATING_VALUES = (1, 2, 3, 4, 5)


def _with_relations(qs):
    return qs.select_related('patient', 'appointment', 'appointment__patient', 'appointment__doctor')


def _reload(pk: int) -> Review:
    return _with_relations(Review.objects.filter(pk=pk)).get()


def _owned_for_update(actor: Actor, review_id: int) -> Review:
    r = Review.objects.select_for_update().filter(pk=review_id, patient_id=actor.id).first()
    if not r:
        raise NotFoundError('Review not found or you do not have permission to modify it')
    return r


def create_review(actor: Actor, data: dict) -> Review:
    require_role(actor, User.ROLE_PATIENT)
    appointment_id = data['appointment_id']
    try:
        with transaction.atomic():
            appt = Appointment.objects.select_for_update().filter(
                pk=appointment_id,
                patient_id=actor.id,
                status=Appointment.STATUS_COMPLETED,
            ).first()
            if not appt:
                raise NotFoundError('Appointment not found or not completed')
            if Review.objects.filter(appointment_id=appt.id).exists():
                raise ConflictError('You have already reviewed this appointment', code='REVIEW_EXISTS')

            r = Review.objects.create(
                appointment=appt,
                patient_id=actor.id,
                rating=data['rating'],
                comment=data['comment'],
            )
            log_action(actor=actor, action='review_create', object_type='review', object_id=r.id,
                       detail={'appointmentId': appt.id, 'rating': r.rating})
    except IntegrityError:
        raise ConflictError('You have already reviewed this appointment', code='REVIEW_EXISTS')

    logger.info('Review %s left on appointment %s by patient %s', r.id, appointment_id, actor.id)
    return _reload(r.id)


def update_review(actor: Actor, review_id: int, data: dict) -> Review:
    require_role(actor, User.ROLE_PATIENT)
    with transaction.atomic():
        r = _owned_for_update(actor, review_id)
        if 'rating' in data:
            r.rating = data['rating']
        if 'comment' in data:
            r.comment = data['comment']
        r.save()
        log_action(actor=actor, action='review_update', object_type='review', object_id=r.id,
                   detail={'fields': sorted(data.keys())})
    return _reload(r.id)


def delete_review(actor: Actor, review_id: int) -> None:
    require_role(actor, User.ROLE_PATIENT)
    with transaction.atomic():
        r = _owned_for_update(actor, review_id)
        appointment_id = r.appointment_id
        r.delete()
        log_action(actor=actor, action='review_delete', object_type='review', object_id=review_id,
                   detail={'appointmentId': appointment_id})


def get_review(actor: Actor, review_id: int) -> Review:
    r = _with_relations(Review.objects.filter(pk=review_id)).first()
    if not r or not can_view_review(actor, r):
        raise NotFoundError('Review not found')
    return r


def list_reviews(actor: Actor, *, doctor_id: Optional[int] = None, page: int = 1, limit: Optional[int] = None):
    """List reviews visible to ``actor``.

    ``doctor_id`` narrows to reviews of that doctor's appointments.  For a
    doctor it replaces the default "my appointments" scope; a patient is
    still limited to their own reviews.
    """
    if doctor_id is not None and actor.is_doctor:
        qs = Review.objects.filter(appointment__doctor_id=doctor_id)
    else:
        qs = Review.objects.filter(review_scope(actor))
        if doctor_id is not None:
            qs = qs.filter(appointment__doctor_id=doctor_id)
    qs = _with_relations(qs).order_by('-created_at', '-id')
    return paginate(qs, page, limit)


def doctor_review_stats(doctor_id: int) -> dict:
    if not User.objects.filter(pk=doctor_id, role=User.ROLE_DOCTOR).exists():
        raise NotFoundError('Doctor not found')

    agg = Review.objects.filter(appointment__doctor_id=doctor_id).aggregate(
        total=Count('id'),
        average=Avg('rating'),
        **{f'r{v}': Count('id', filter=Q(rating=v)) for v in RATING_VALUES},
    )
    average = round(float(agg['average']), 2) if agg['average'] is not None else 0
    return {
        'doctorId': doctor_id,
        'totalReviews': agg['total'],
        'averageRating': average,
        'ratingDistribution': [{'rating': v, 'count': agg[f'r{v}']} for v in RATING_VALUES],
    }
