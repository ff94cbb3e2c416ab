"""
Role permissions and the authorization policy for clinic resources.

DRF permission classes gate whole endpoints by role.  The policy
functions below decide, for an explicit :class:`Actor` and a concrete
resource, whether the resource is visible or may be acted on.  Keeping
the rules here means list queries and single-object checks share one
definition.
"""
from __future__ import annotations

from dataclasses import dataclass

from django.db.models import Q
from rest_framework.permissions import BasePermission

from .exceptions import AuthorizationError
from .models import Appointment, Prescription, Review, User


@dataclass(frozen=True)
class Actor:
    """The credential a service call runs under."""
    id: int
    role: str

    @classmethod
    def from_user(cls, user: User) -> 'Actor':
        return cls(id=user.id, role=user.role)

    @property
    def is_patient(self) -> bool:
        return self.role == User.ROLE_PATIENT

    @property
    def is_doctor(self) -> bool:
        return self.role == User.ROLE_DOCTOR


def require_role(actor: Actor, role: str) -> None:
    if actor.role != role:
        raise AuthorizationError(f'This action requires the {role.lower()} role')


class IsPatientRole(BasePermission):
    """Allow access only to users with the patient role."""
    message = 'This action requires the patient role'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == User.ROLE_PATIENT)


class IsDoctorRole(BasePermission):
    """Allow access only to users with the doctor role."""
    message = 'This action requires the doctor role'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == User.ROLE_DOCTOR)


# ---------------------------------------------------------------------------
# Appointments
# ---------------------------------------------------------------------------

def appointment_scope(actor: Actor) -> Q:
    """Filter selecting the appointments ``actor`` may see.

    Doctors work from a shared pool and see every appointment; patients
    see only their own bookings.
    """
    if actor.is_doctor:
        return Q()
    if actor.is_patient:
        return Q(patient_id=actor.id)
    return Q(pk__in=[])


def can_view_appointment(actor: Actor, appointment: Appointment) -> bool:
    if actor.is_doctor:
        return True
    return actor.is_patient and appointment.patient_id == actor.id


def can_cancel_appointment(actor: Actor, appointment: Appointment) -> bool:
    if actor.is_patient:
        return appointment.patient_id == actor.id
    if actor.is_doctor:
        return appointment.doctor_id == actor.id
    return False


# ---------------------------------------------------------------------------
# Prescriptions & reviews
# ---------------------------------------------------------------------------

def prescription_scope(actor: Actor) -> Q:
    if actor.is_doctor:
        return Q(doctor_id=actor.id)
    if actor.is_patient:
        return Q(appointment__patient_id=actor.id)
    return Q(pk__in=[])


def can_view_prescription(actor: Actor, prescription: Prescription) -> bool:
    if actor.is_doctor:
        return prescription.doctor_id == actor.id
    return actor.is_patient and prescription.appointment.patient_id == actor.id


def review_scope(actor: Actor) -> Q:
    if actor.is_doctor:
        return Q(appointment__doctor_id=actor.id)
    if actor.is_patient:
        return Q(patient_id=actor.id)
    return Q(pk__in=[])


def can_view_review(actor: Actor, review: Review) -> bool:
    if actor.is_doctor:
        return review.appointment.doctor_id == actor.id
    return actor.is_patient and review.patient_id == actor.id


# ---------------------------------------------------------------------------
# User profiles
# ---------------------------------------------------------------------------

def can_view_profile(actor: Actor, user_id: int) -> bool:
    return actor.id == user_id or actor.is_doctor
