"""
Authentication views: signup, login, current user, refresh and logout.

These live apart from the authentication class (see
``clinic.authentication``) so that DRF can import the class during
start-up without pulling in the views.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.throttling import AnonRateThrottle
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer

from clinic.serializers.auth import LoginSerializer, LogoutSerializer, RefreshSerializer, SignupSerializer
from clinic.services import accounts
from clinic.services.formatting import format_user
from clinic.views.common import envelope, validated


class LoginRateThrottle(AnonRateThrottle):
    """Per-IP limit on credential checks, rate set by ``login`` in settings."""
    scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def signup_view(request):
    data = validated(SignupSerializer, request.data)
    user = accounts.register_user(data)
    payload = {'user': format_user(user), **accounts.issue_tokens(user)}
    return envelope(payload, message='User registered successfully', status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """
    Email/password login.
    Returns the user together with an access ``token`` and a ``refresh`` token.
    """
    data = validated(LoginSerializer, request.data)
    user = accounts.authenticate_user(request, data['email'], data['password'])
    payload = {'user': format_user(user), **accounts.issue_tokens(user)}
    return envelope(payload, message='Login successful')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return envelope({'user': format_user(request.user)})


@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_view(request):
    """Return a new access token from a refresh token."""
    data = validated(RefreshSerializer, request.data)
    s = TokenRefreshSerializer(data={'refresh': data['refresh']})
    try:
        s.is_valid(raise_exception=True)
    except TokenError as e:
        raise InvalidToken(e.args[0])
    payload = {'token': s.validated_data['access']}
    if 'refresh' in s.validated_data:
        payload['refresh'] = s.validated_data['refresh']
    return envelope(payload)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist the given refresh token, or all of the caller's refresh tokens."""
    data = validated(LogoutSerializer, request.data)
    count = accounts.blacklist_tokens(request.user, data.get('refresh'))
    return envelope({'blacklisted': count}, message='Logged out successfully')
