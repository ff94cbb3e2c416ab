"""
End-to-end test of a visit through the public API.

A pet owner signs up and books, a doctor claims and completes the
visit, writes a prescription, and the owner leaves a review.  Each step
goes through real JWT login using DRF's APIClient within APITestCase.

To run the tests:

```
pytest -q clinic/tests
```
"""
from datetime import timedelta

from django.core.cache import cache
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..models import Appointment, AuditEvent, User


class VisitLifecycleTests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.doctor = User.objects.create_user(
            email="vet@clinic.test",
            password="Vetpass123",
            name="Dr. Mira",
            role=User.ROLE_DOCTOR,
            specialty="Dermatology",
        )

    def login(self, email: str, password: str) -> APIClient:
        client = APIClient()
        resp = client.post(reverse("auth-login"), {"email": email, "password": password}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {resp.data['data']['token']}")
        return client

    def test_full_visit(self) -> None:
        # Owner signs up
        resp = self.client.post(
            reverse("auth-signup"),
            {"name": "Pat Owner", "email": "pat@clinic.test", "password": "Ownerpass1", "phone": "5559990000"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        owner = self.login("pat@clinic.test", "Ownerpass1")
        vet = self.login("vet@clinic.test", "Vetpass123")

        # Book
        resp = owner.post(
            reverse("appointments"),
            {
                "petName": "Whiskers",
                "animalType": "Cat",
                "breed": "Siamese",
                "petAge": "2 years",
                "reason": "Itchy skin around the ears",
                "doctorSpecialty": "Dermatology",
                "date": (timezone.now() + timedelta(days=2)).date().isoformat(),
                "time": "11:00",
                "priority": "HIGH",
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        appt_id = resp.data["data"]["appointment"]["id"]
        self.assertIsNone(resp.data["data"]["appointment"]["doctor"])

        # Claim, then a review too early is refused
        resp = vet.post(reverse("appointment-assign", args=[appt_id]))
        self.assertEqual(resp.data["data"]["appointment"]["status"], Appointment.STATUS_CONFIRMED)
        self.assertEqual(resp.data["data"]["appointment"]["doctor"]["id"], self.doctor.id)
        resp = owner.post(reverse("reviews"), {"appointmentId": appt_id, "rating": 5,
                                               "comment": "Great care for our cat"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        # Complete and prescribe
        resp = vet.put(reverse("appointment-detail", args=[appt_id]),
                       {"status": "COMPLETED", "doctorNotes": "Mild dermatitis"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        resp = vet.post(
            reverse("prescriptions"),
            {
                "appointmentId": appt_id,
                "diagnosis": "Allergic dermatitis",
                "medications": [{"name": "Apoquel", "dosage": "3.6mg", "frequency": "Daily", "duration": "14 days"}],
                "followUpInstructions": "Switch to hypoallergenic food",
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)

        # Review
        resp = owner.post(reverse("reviews"), {"appointmentId": appt_id, "rating": 5,
                                               "comment": "Great care for our cat"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)

        # Owner sees everything hanging off the visit
        resp = owner.get(reverse("appointment-detail", args=[appt_id]))
        data = resp.data["data"]["appointment"]
        self.assertEqual(data["status"], Appointment.STATUS_COMPLETED)
        self.assertEqual(data["prescription"]["medications"][0]["name"], "Apoquel")
        self.assertEqual(data["review"]["rating"], 5)

        # Terminal: nothing moves any more
        resp = vet.put(reverse("appointment-detail", args=[appt_id]), {"status": "CANCELLED"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        resp = owner.delete(reverse("appointment-detail", args=[appt_id]))
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)

        # Stats and audit trail
        resp = vet.get(reverse("review-doctor-stats", args=[self.doctor.id]))
        self.assertEqual(resp.data["data"]["averageRating"], 5)
        actions = set(AuditEvent.objects.filter(object_id=appt_id, object_type="appointment")
                      .values_list("action", flat=True))
        self.assertEqual(actions, {"appointment_create", "appointment_assign", "appointment_update"})
