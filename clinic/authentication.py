"""
Bearer token authentication for the API.

This module defines a subclass of simplejwt's ``JWTAuthentication``.
Keeping it apart from any view definitions avoids circular imports when
the REST framework imports authentication classes during start-up, and
gives the settings a stable import path.
"""
from __future__ import annotations

from rest_framework_simplejwt import authentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed


class JWTAuthentication(authentication.JWTAuthentication):
    """JWT authentication using the ``Bearer`` keyword.

    On top of simplejwt's checks this rejects a token whose ``role``
    claim no longer matches the stored account, so a role change takes
    effect without waiting for the token to expire.
    """

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        claimed = validated_token.get('role')
        if claimed is not None and claimed != user.role:
            raise AuthenticationFailed('Token role is out of date', code='token_role_mismatch')
        return user
