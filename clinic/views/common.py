"""Helpers shared by the API views."""
from __future__ import annotations

from typing import Any, Optional

from rest_framework import status as http_status
from rest_framework.response import Response

from clinic.permissions import Actor


def actor_of(request) -> Actor:
    return Actor.from_user(request.user)


def envelope(data: Any = None, *, message: Optional[str] = None, status: int = http_status.HTTP_200_OK) -> Response:
    """Wrap a successful result as ``{success, message?, data?}``."""
    payload: dict[str, Any] = {'success': True}
    if message:
        payload['message'] = message
    if data is not None:
        payload['data'] = data
    return Response(payload, status=status)


def validated(serializer_class, data) -> dict:
    s = serializer_class(data=data)
    s.is_valid(raise_exception=True)
    return s.validated_data


def query_params(serializer_class, request) -> dict:
    return validated(serializer_class, request.query_params)
