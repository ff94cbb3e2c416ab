from datetime import timedelta

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from clinic.models import Appointment, User
from clinic.services.accounts import issue_tokens

PASSWORD = 'Secret123'


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle counters live in the cache
    cache.clear()
    yield
    cache.clear()


def make_user(email, role=User.ROLE_PATIENT, name=None, **extra):
    return User.objects.create_user(
        email=email, password=PASSWORD, name=name or email.split('@')[0].title(), role=role, **extra
    )


def client_for(user) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_tokens(user)['token']}")
    return client


def make_appointment(patient, doctor=None, status=Appointment.STATUS_PENDING, days=3, **extra):
    fields = {
        'pet_name': 'Rex',
        'animal_type': 'Dog',
        'breed': 'Beagle',
        'pet_age': '4 years',
        'reason': 'Annual check-up and vaccines',
        'doctor_specialty': 'General Practice',
        'date': timezone.now() + timedelta(days=days),
        'time': '10:30',
    }
    fields.update(extra)
    return Appointment.objects.create(patient=patient, doctor=doctor, status=status, **fields)


def appointment_payload(**overrides):
    data = {
        'petName': 'Rex',
        'animalType': 'Dog',
        'breed': 'Beagle',
        'petAge': '4 years',
        'reason': 'Limping on the front left leg',
        'doctorSpecialty': 'Orthopedics',
        'date': (timezone.now() + timedelta(days=5)).isoformat(),
        'time': '14:00',
    }
    data.update(overrides)
    return data


def prescription_payload(appointment_id=None, **overrides):
    data = {
        'diagnosis': 'Mild sprain of the carpus',
        'medications': [
            {'name': 'Carprofen', 'dosage': '25mg', 'frequency': 'Twice daily', 'duration': '7 days'},
        ],
        'followUpInstructions': 'Restrict exercise and recheck in two weeks',
    }
    if appointment_id is not None:
        data['appointmentId'] = appointment_id
    data.update(overrides)
    return data


@pytest.fixture
def patient(db):
    return make_user('owner@example.com', name='Olive Owner')


@pytest.fixture
def other_patient(db):
    return make_user('second@example.com', name='Sam Second')


@pytest.fixture
def doctor(db):
    return make_user('vet@example.com', role=User.ROLE_DOCTOR, name='Dana Vet', specialty='Orthopedics')


@pytest.fixture
def other_doctor(db):
    return make_user('vet2@example.com', role=User.ROLE_DOCTOR, name='Eli Vet', specialty='Dermatology')


@pytest.fixture
def patient_client(patient):
    return client_for(patient)


@pytest.fixture
def other_patient_client(other_patient):
    return client_for(other_patient)


@pytest.fixture
def doctor_client(doctor):
    return client_for(doctor)


@pytest.fixture
def other_doctor_client(other_doctor):
    return client_for(other_doctor)


@pytest.fixture
def completed_appointment(patient, doctor):
    return make_appointment(patient, doctor, status=Appointment.STATUS_COMPLETED)
