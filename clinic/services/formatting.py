"""
JSON shapes returned by the API.

Keys are camelCase to match what the dashboard frontend consumes.
Related rows are included when they have been loaded (or can be
loaded); callers use ``select_related``/``prefetch_related`` to keep
the query count flat.
"""
from __future__ import annotations

from typing import Optional

from clinic.models import Appointment, Medication, Prescription, Review, User


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def format_user(user: User) -> dict:
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'role': user.role,
        'phone': user.phone or None,
        'specialty': user.specialty or None,
        'createdAt': _iso(user.date_joined),
        'updatedAt': _iso(user.updated_at),
    }


def format_user_brief(user: Optional[User], *, with_phone: bool = False) -> Optional[dict]:
    if user is None:
        return None
    data = {'id': user.id, 'name': user.name, 'email': user.email}
    if with_phone:
        data['phone'] = user.phone or None
    return data


def format_medication(med: Medication) -> dict:
    return {
        'id': med.id,
        'name': med.name,
        'dosage': med.dosage,
        'frequency': med.frequency,
        'duration': med.duration,
        'instructions': med.instructions or None,
    }


def format_appointment(appt: Appointment, *, with_children: bool = True) -> dict:
    data = {
        'id': appt.id,
        'petName': appt.pet_name,
        'animalType': appt.animal_type,
        'breed': appt.breed,
        'petAge': appt.pet_age,
        'reason': appt.reason,
        'doctorSpecialty': appt.doctor_specialty,
        'date': _iso(appt.date),
        'time': appt.time,
        'additionalNotes': appt.additional_notes or None,
        'priority': appt.priority,
        'status': appt.status,
        'doctorNotes': appt.doctor_notes or None,
        'patientId': appt.patient_id,
        'doctorId': appt.doctor_id,
        'patient': format_user_brief(appt.patient, with_phone=True),
        'doctor': format_user_brief(appt.doctor),
        'createdAt': _iso(appt.created_at),
        'updatedAt': _iso(appt.updated_at),
    }
    if with_children:
        prescription = getattr(appt, 'prescription', None)
        review = getattr(appt, 'review', None)
        data['prescription'] = format_prescription(prescription, with_appointment=False) if prescription else None
        data['review'] = format_review(review, with_appointment=False) if review else None
    return data


def format_prescription(p: Prescription, *, with_appointment: bool = True) -> dict:
    data = {
        'id': p.id,
        'appointmentId': p.appointment_id,
        'doctorId': p.doctor_id,
        'diagnosis': p.diagnosis,
        'medications': [format_medication(m) for m in p.medications.all()],
        'followUpInstructions': p.follow_up_instructions,
        'nextAppointment': _iso(p.next_appointment),
        'createdAt': _iso(p.created_at),
        'updatedAt': _iso(p.updated_at),
    }
    if with_appointment:
        data['doctor'] = format_user_brief(p.doctor)
        data['appointment'] = format_appointment(p.appointment, with_children=False)
    return data


def format_review(r: Review, *, with_appointment: bool = True) -> dict:
    data = {
        'id': r.id,
        'appointmentId': r.appointment_id,
        'patientId': r.patient_id,
        'rating': r.rating,
        'comment': r.comment,
        'createdAt': _iso(r.created_at),
        'updatedAt': _iso(r.updated_at),
    }
    if with_appointment:
        data['patient'] = format_user_brief(r.patient)
        data['appointment'] = format_appointment(r.appointment, with_children=False)
    return data
