"""
Signup, login and token issuance.

Tokens are simplejwt access/refresh pairs.  Both carry the user's
``role`` and ``email`` so clients can route without an extra request;
``clinic.authentication`` re-checks the role claim against the database
on every call.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from clinic.exceptions import AuthenticationError, ConflictError, ValidationError
from clinic.models import User
from clinic.permissions import Actor
from clinic.services.audit import log_action

logger = logging.getLogger(__name__)


def check_password_strength(password: str, user: Optional[User] = None) -> None:
    """Run the configured Django password validators."""
    try:
        validate_password(password, user=user)
    except DjangoValidationError as e:
        raise ValidationError(' '.join(e.messages), code='WEAK_PASSWORD')


def issue_tokens(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    refresh['email'] = user.email
    return {'token': str(refresh.access_token), 'refresh': str(refresh)}


def register_user(data: dict) -> User:
    fields = dict(data)
    email = fields.pop('email')
    password = fields.pop('password')
    if fields.get('role') != User.ROLE_DOCTOR:
        fields.pop('specialty', None)

    if User.objects.filter(email__iexact=email).exists():
        raise ConflictError('User with this email already exists', code='EMAIL_EXISTS')
    check_password_strength(password, User(email=email, name=fields.get('name', '')))

    try:
        with transaction.atomic():
            user = User.objects.create_user(email=email, password=password, **fields)
    except IntegrityError:
        raise ConflictError('User with this email already exists', code='EMAIL_EXISTS')

    log_action(actor=Actor.from_user(user), action='signup', object_type='user', object_id=user.id,
               detail={'role': user.role})
    logger.info('New %s account %s registered', user.role.lower(), user.id)
    return user


def authenticate_user(request, email: str, password: str) -> User:
    user = authenticate(request, email=email, password=password)
    if not user:
        log_action(actor=None, action='login', object_type='user',
                   detail={'result': 'fail', 'email': email, 'ip': request.META.get('REMOTE_ADDR')})
        logger.warning('Failed login for %s', email)
        raise AuthenticationError('Invalid email or password', code='INVALID_CREDENTIALS')

    log_action(actor=Actor.from_user(user), action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': request.META.get('REMOTE_ADDR')})
    return user


def blacklist_tokens(user: User, refresh: Optional[str] = None) -> int:
    """Blacklist one refresh token, or every outstanding one of ``user``.

    Returns how many tokens were newly blacklisted.
    """
    if refresh:
        try:
            jti = RefreshToken(refresh)['jti']
        except TokenError as e:
            raise ValidationError(str(e), code='INVALID_TOKEN')
        outstanding = OutstandingToken.objects.filter(user=user, jti=jti)
    else:
        outstanding = OutstandingToken.objects.filter(user=user)

    count = 0
    for token in outstanding:
        _, created = BlacklistedToken.objects.get_or_create(token=token)
        count += int(created)
    log_action(actor=Actor.from_user(user), action='logout', object_type='user', object_id=user.id,
               detail={'blacklisted': count})
    return count
