from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorRole
from clinic.serializers.users import (
    DoctorListQuerySerializer,
    PasswordChangeSerializer,
    PatientListQuerySerializer,
    ProfileUpdateSerializer,
)
from clinic.services import users as svc
from clinic.services.formatting import format_user
from .common import actor_of, envelope, query_params, validated


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_doctors(request):
    """Doctors ordered by name.  Query params: specialty, page, limit"""
    q = query_params(DoctorListQuerySerializer, request)
    items, pagination = svc.list_doctors(specialty=q.get('specialty'), page=q['page'], limit=q.get('limit'))
    return envelope({'doctors': [format_user(u) for u in items], 'pagination': pagination})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def list_patients(request):
    """Patients ordered by name.  Query params: search (name or email), page, limit"""
    q = query_params(PatientListQuerySerializer, request)
    items, pagination = svc.list_patients(actor_of(request), search=q.get('search'), page=q['page'],
                                          limit=q.get('limit'))
    return envelope({'patients': [format_user(u) for u in items], 'pagination': pagination})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, pk: int):
    actor = actor_of(request)
    if request.method == 'PUT':
        data = validated(ProfileUpdateSerializer, request.data)
        user = svc.update_profile(actor, pk, data)
        return envelope({'user': format_user(user)}, message='Profile updated successfully')
    if request.method == 'DELETE':
        svc.delete_account(actor, pk)
        return envelope(message='Account deleted successfully')

    return envelope({'user': format_user(svc.get_user(actor, pk))})


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def change_password(request, pk: int):
    data = validated(PasswordChangeSerializer, request.data)
    svc.change_password(actor_of(request), pk, data['current_password'], data['new_password'])
    return envelope(message='Password updated successfully')
