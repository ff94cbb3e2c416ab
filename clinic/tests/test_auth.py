import pytest
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken

from clinic.auth_views import LoginRateThrottle
from clinic.models import AuditEvent, User
from .conftest import PASSWORD, client_for

pytestmark = pytest.mark.django_db


def signup(client, **overrides):
    data = {'name': 'Nina Owner', 'email': 'Nina@Example.com', 'password': 'Secret123'}
    data.update(overrides)
    return client.post(reverse('auth-signup'), data, format='json')


def test_signup_creates_patient_and_returns_tokens():
    r = signup(APIClient())
    assert r.status_code == 201
    body = r.json()
    assert body['success'] is True
    assert body['data']['user']['email'] == 'nina@example.com'
    assert body['data']['user']['role'] == User.ROLE_PATIENT
    assert body['data']['token'] and body['data']['refresh']
    assert User.objects.get(email='nina@example.com').check_password('Secret123')


def test_signup_doctor_keeps_specialty_but_patient_does_not():
    client = APIClient()
    r = signup(client, email='doc@example.com', role='DOCTOR', specialty='Cardiology')
    assert r.json()['data']['user']['specialty'] == 'Cardiology'
    r = signup(client, email='pat@example.com', specialty='Cardiology')
    assert r.json()['data']['user']['specialty'] is None


def test_signup_duplicate_email_conflicts(patient):
    r = signup(APIClient(), email='OWNER@example.com')
    assert r.status_code == 409
    assert r.json()['code'] == 'EMAIL_EXISTS'


def test_signup_weak_password_rejected():
    r = signup(APIClient(), password='12345678')
    assert r.status_code == 400
    assert r.json()['code'] == 'WEAK_PASSWORD'
    assert not User.objects.exists()


def test_signup_validation_error_envelope():
    r = signup(APIClient(), name='N', email='not-an-email')
    assert r.status_code == 400
    body = r.json()
    assert body['success'] is False
    assert body['code'] == 'VALIDATION_ERROR'
    assert set(body['data']['errors']) == {'name', 'email'}


def test_signup_strips_markup_from_name():
    r = signup(APIClient(), name='<b>Nina</b> Owner')
    assert r.json()['data']['user']['name'] == 'Nina Owner'


def test_login_success_and_me(patient):
    client = APIClient()
    r = client.post(reverse('auth-login'), {'email': 'owner@example.com', 'password': PASSWORD}, format='json')
    assert r.status_code == 200
    token = r.json()['data']['token']

    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    r = client.get(reverse('auth-me'))
    assert r.status_code == 200
    assert r.json()['data']['user']['id'] == patient.id
    assert AuditEvent.objects.filter(action='login', user=patient).exists()


def test_login_bad_password(patient):
    r = APIClient().post(reverse('auth-login'), {'email': 'owner@example.com', 'password': 'wrong-one'}, format='json')
    assert r.status_code == 401
    assert r.json()['code'] == 'INVALID_CREDENTIALS'
    assert AuditEvent.objects.filter(action='login', user__isnull=True).exists()


def test_me_requires_token():
    r = APIClient().get(reverse('auth-me'))
    assert r.status_code == 401
    assert r.json()['success'] is False
    assert r.json()['code'] == 'UNAUTHORIZED'


def test_garbage_token_rejected():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer not.a.jwt')
    assert client.get(reverse('auth-me')).status_code == 401


def test_token_with_stale_role_rejected(patient):
    client = client_for(patient)
    User.objects.filter(pk=patient.pk).update(role=User.ROLE_DOCTOR)
    assert client.get(reverse('auth-me')).status_code == 401


def test_refresh_returns_new_access_token(patient):
    client = APIClient()
    r = client.post(reverse('auth-login'), {'email': 'owner@example.com', 'password': PASSWORD}, format='json')
    refresh = r.json()['data']['refresh']

    r = client.post(reverse('auth-refresh'), {'refresh': refresh}, format='json')
    assert r.status_code == 200
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.json()['data']['token']}")
    assert client.get(reverse('auth-me')).status_code == 200


def test_refresh_with_invalid_token():
    r = APIClient().post(reverse('auth-refresh'), {'refresh': 'bogus'}, format='json')
    assert r.status_code == 401


def test_logout_blacklists_given_refresh_token(patient):
    client = APIClient()
    r = client.post(reverse('auth-login'), {'email': 'owner@example.com', 'password': PASSWORD}, format='json')
    data = r.json()['data']
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['token']}")

    r = client.post(reverse('auth-logout'), {'refresh': data['refresh']}, format='json')
    assert r.status_code == 200
    assert r.json()['data']['blacklisted'] == 1

    r = client.post(reverse('auth-refresh'), {'refresh': data['refresh']}, format='json')
    assert r.status_code == 401


def test_logout_without_token_blacklists_everything(patient):
    client_for(patient)
    client = client_for(patient)
    r = client.post(reverse('auth-logout'), {}, format='json')
    assert r.status_code == 200
    assert r.json()['data']['blacklisted'] == OutstandingToken.objects.filter(user=patient).count() == 2
    assert BlacklistedToken.objects.count() == 2


def test_login_is_rate_limited(patient, monkeypatch):
    monkeypatch.setattr(LoginRateThrottle, 'rate', '2/min', raising=False)
    client = APIClient()
    payload = {'email': 'owner@example.com', 'password': 'wrong-one'}
    codes = [client.post(reverse('auth-login'), payload, format='json').status_code for _ in range(3)]
    assert codes == [401, 401, 429]
