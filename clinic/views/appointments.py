from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorRole
from clinic.serializers.appointment import (
    AppointmentCreateSerializer,
    AppointmentListQuerySerializer,
    AppointmentUpdateSerializer,
)
from clinic.services import appointments as svc
from clinic.services.formatting import format_appointment
from .common import actor_of, envelope, query_params, validated


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def appointments(request):
    """
    GET: list appointments visible to the caller.
      Query params: status (PENDING|CONFIRMED|COMPLETED|CANCELLED|all), page, limit
    POST: book an appointment (patients only).
    """
    actor = actor_of(request)
    if request.method == 'POST':
        data = validated(AppointmentCreateSerializer, request.data)
        appt = svc.create_appointment(actor, data)
        return envelope({'appointment': format_appointment(appt)}, message='Appointment created successfully',
                        status=status.HTTP_201_CREATED)

    q = query_params(AppointmentListQuerySerializer, request)
    items, pagination = svc.list_appointments(actor, status=q.get('status'), page=q['page'], limit=q.get('limit'))
    return envelope({'appointments': [format_appointment(a) for a in items], 'pagination': pagination})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, pk: int):
    actor = actor_of(request)
    if request.method == 'PUT':
        data = validated(AppointmentUpdateSerializer, request.data)
        appt = svc.update_appointment(actor, pk, data)
        return envelope({'appointment': format_appointment(appt)}, message='Appointment updated successfully')
    if request.method == 'DELETE':
        appt = svc.cancel_appointment(actor, pk)
        return envelope({'appointment': format_appointment(appt)}, message='Appointment cancelled successfully')

    appt = svc.get_appointment(actor, pk)
    return envelope({'appointment': format_appointment(appt)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def appointment_assign(request, pk: int):
    appt = svc.assign_appointment(actor_of(request), pk)
    return envelope({'appointment': format_appointment(appt)}, message='Appointment assigned successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats(request):
    return envelope(svc.dashboard_stats(actor_of(request)))
