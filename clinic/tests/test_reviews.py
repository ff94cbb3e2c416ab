import pytest
from django.urls import reverse

from clinic.exceptions import NotFoundError
from clinic.models import Appointment, Review
from clinic.services.reviews import doctor_review_stats
from .conftest import make_appointment

pytestmark = pytest.mark.django_db

LIST_URL = reverse('reviews')


def detail_url(pk):
    return reverse('review-detail', args=[pk])


def review_payload(appointment_id, rating=5, comment='Very gentle with our dog, thank you!'):
    return {'appointmentId': appointment_id, 'rating': rating, 'comment': comment}


def test_owner_reviews_completed_appointment(patient, patient_client, completed_appointment):
    r = patient_client.post(LIST_URL, review_payload(completed_appointment.id), format='json')
    assert r.status_code == 201
    data = r.json()['data']['review']
    assert data['rating'] == 5
    assert data['patientId'] == patient.id
    assert data['appointment']['id'] == completed_appointment.id


def test_second_review_conflicts(patient_client, completed_appointment):
    assert patient_client.post(LIST_URL, review_payload(completed_appointment.id), format='json').status_code == 201
    r = patient_client.post(LIST_URL, review_payload(completed_appointment.id, rating=1), format='json')
    assert r.status_code == 409
    assert r.json()['code'] == 'REVIEW_EXISTS'
    assert Review.objects.get().rating == 5


def test_review_requires_completed_own_appointment(patient, doctor, patient_client, other_patient_client,
                                                   completed_appointment):
    confirmed = make_appointment(patient, doctor, status=Appointment.STATUS_CONFIRMED)
    assert patient_client.post(LIST_URL, review_payload(confirmed.id), format='json').status_code == 404
    assert other_patient_client.post(LIST_URL, review_payload(completed_appointment.id),
                                     format='json').status_code == 404


def test_doctor_cannot_review(doctor_client, completed_appointment):
    assert doctor_client.post(LIST_URL, review_payload(completed_appointment.id), format='json').status_code == 403


@pytest.mark.parametrize('rating, comment, field', [
    (0, 'Perfectly fine visit overall', 'rating'),
    (6, 'Perfectly fine visit overall', 'rating'),
    (4, 'short', 'comment'),
])
def test_review_validation(patient_client, completed_appointment, rating, comment, field):
    r = patient_client.post(LIST_URL, review_payload(completed_appointment.id, rating, comment), format='json')
    assert r.status_code == 400
    assert field in r.json()['data']['errors']


def test_markup_only_comment_rejected(patient_client, completed_appointment):
    r = patient_client.post(LIST_URL, review_payload(completed_appointment.id, comment='<p></p><p></p>'), format='json')
    assert r.status_code == 400
    assert 'comment' in r.json()['data']['errors']
    assert not Review.objects.exists()


def test_comment_length_counts_escaped_entities(patient_client, completed_appointment):
    comment = 'Tom & Jerry ' * 41 + 'okay1234'
    assert len(comment) == 500
    r = patient_client.post(LIST_URL, review_payload(completed_appointment.id, comment=comment), format='json')
    assert r.status_code == 400
    assert r.json()['message'] == 'Comment cannot exceed 500 characters'
    assert not Review.objects.exists()

    r = patient_client.post(LIST_URL, review_payload(completed_appointment.id, comment='Tom & Jerry loved it'),
                            format='json')
    assert r.status_code == 201
    assert Review.objects.get().comment == 'Tom &amp; Jerry loved it'


def test_update_and_delete_by_owner_only(patient_client, other_patient_client, completed_appointment):
    rid = patient_client.post(LIST_URL, review_payload(completed_appointment.id), format='json').json()['data']['review']['id']

    assert other_patient_client.put(detail_url(rid), {'rating': 1}, format='json').status_code == 404
    assert patient_client.put(detail_url(rid), {}, format='json').status_code == 400

    r = patient_client.put(detail_url(rid), {'rating': 3}, format='json')
    assert r.status_code == 200
    assert r.json()['data']['review']['rating'] == 3
    assert r.json()['data']['review']['comment'] == 'Very gentle with our dog, thank you!'

    assert other_patient_client.delete(detail_url(rid)).status_code == 404
    assert patient_client.delete(detail_url(rid)).status_code == 200
    assert not Review.objects.exists()


def test_review_visibility_and_doctor_filter(patient, doctor, other_doctor, patient_client, doctor_client,
                                             other_doctor_client, other_patient_client, completed_appointment):
    rid = patient_client.post(LIST_URL, review_payload(completed_appointment.id), format='json').json()['data']['review']['id']

    assert doctor_client.get(detail_url(rid)).status_code == 200
    assert other_doctor_client.get(detail_url(rid)).status_code == 404
    assert other_patient_client.get(detail_url(rid)).status_code == 404

    assert doctor_client.get(LIST_URL).json()['data']['pagination']['total'] == 1
    assert other_doctor_client.get(LIST_URL).json()['data']['pagination']['total'] == 0
    # doctorId widens a doctor's view to another doctor's reviews
    r = other_doctor_client.get(LIST_URL, {'doctorId': doctor.id})
    assert [x['id'] for x in r.json()['data']['reviews']] == [rid]
    # but a patient only ever sees their own
    r = other_patient_client.get(LIST_URL, {'doctorId': doctor.id})
    assert r.json()['data']['reviews'] == []


def test_doctor_stats(patient, other_patient, doctor, patient_client):
    for rating, owner in ((5, patient), (4, patient), (4, other_patient)):
        appt = make_appointment(owner, doctor, status=Appointment.STATUS_COMPLETED)
        Review.objects.create(appointment=appt, patient=owner, rating=rating, comment='Lovely visit, thanks a lot')

    r = patient_client.get(reverse('review-doctor-stats', args=[doctor.id]))
    assert r.status_code == 200
    data = r.json()['data']
    assert data['totalReviews'] == 3
    assert data['averageRating'] == 4.33
    assert data['ratingDistribution'] == [
        {'rating': 1, 'count': 0},
        {'rating': 2, 'count': 0},
        {'rating': 3, 'count': 0},
        {'rating': 4, 'count': 2},
        {'rating': 5, 'count': 1},
    ]


def test_doctor_stats_without_reviews(doctor):
    stats = doctor_review_stats(doctor.id)
    assert stats['totalReviews'] == 0
    assert stats['averageRating'] == 0
    assert all(bucket['count'] == 0 for bucket in stats['ratingDistribution'])


def test_doctor_stats_unknown_doctor(patient, patient_client):
    with pytest.raises(NotFoundError):
        doctor_review_stats(patient.id)
    assert patient_client.get(reverse('review-doctor-stats', args=[987654])).status_code == 404
