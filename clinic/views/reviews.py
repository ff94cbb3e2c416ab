from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.serializers.review import ReviewCreateSerializer, ReviewListQuerySerializer, ReviewUpdateSerializer
from clinic.services import reviews as svc
from clinic.services.formatting import format_review
from .common import actor_of, envelope, query_params, validated


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def reviews(request):
    """
    GET: list reviews.  Query params: doctorId, page, limit
    POST: review a completed appointment (patients only).
    """
    actor = actor_of(request)
    if request.method == 'POST':
        data = validated(ReviewCreateSerializer, request.data)
        r = svc.create_review(actor, data)
        return envelope({'review': format_review(r)}, message='Review created successfully', status=status.HTTP_201_CREATED)

    q = query_params(ReviewListQuerySerializer, request)
    items, pagination = svc.list_reviews(actor, doctor_id=q.get('doctor_id'), page=q['page'], limit=q.get('limit'))
    return envelope({'reviews': [format_review(r) for r in items], 'pagination': pagination})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def review_detail(request, pk: int):
    actor = actor_of(request)
    if request.method == 'PUT':
        data = validated(ReviewUpdateSerializer, request.data)
        r = svc.update_review(actor, pk, data)
        return envelope({'review': format_review(r)}, message='Review updated successfully')
    if request.method == 'DELETE':
        svc.delete_review(actor, pk)
        return envelope(message='Review deleted successfully')

    return envelope({'review': format_review(svc.get_review(actor, pk))})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def doctor_stats(request, doctor_id: int):
    return envelope(svc.doctor_review_stats(doctor_id))
