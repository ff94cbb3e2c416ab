from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.serializers.common import PageQuerySerializer
from clinic.serializers.prescription import PrescriptionCreateSerializer, PrescriptionSerializer
from clinic.services import prescriptions as svc
from clinic.services.formatting import format_prescription
from .common import actor_of, envelope, query_params, validated


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def prescriptions(request):
    actor = actor_of(request)
    if request.method == 'POST':
        data = validated(PrescriptionCreateSerializer, request.data)
        p = svc.create_prescription(actor, data)
        return envelope({'prescription': format_prescription(p)}, message='Prescription created successfully',
                        status=status.HTTP_201_CREATED)

    q = query_params(PageQuerySerializer, request)
    items, pagination = svc.list_prescriptions(actor, page=q['page'], limit=q.get('limit'))
    return envelope({'prescriptions': [format_prescription(p) for p in items], 'pagination': pagination})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def prescription_detail(request, pk: int):
    actor = actor_of(request)
    if request.method == 'PUT':
        data = validated(PrescriptionSerializer, request.data)
        p = svc.update_prescription(actor, pk, data)
        return envelope({'prescription': format_prescription(p)}, message='Prescription updated successfully')
    if request.method == 'DELETE':
        svc.delete_prescription(actor, pk)
        return envelope(message='Prescription deleted successfully')

    return envelope({'prescription': format_prescription(svc.get_prescription(actor, pk))})
