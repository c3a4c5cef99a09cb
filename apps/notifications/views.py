from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .serializers import (
    NotificationSerializer,
    NotificationFilterSerializer,
    MarkAllReadResponseSerializer,
)
from .services import (
    get_member_notifications,
    mark_as_read,
    mark_all_as_read,
    NotificationNotFoundError,
)


class NotificationPagination(PageNumberPagination):
    """Custom pagination for notifications."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(
    parameters=[
        OpenApiParameter('unread', OpenApiTypes.BOOL, description='Only unread notifications'),
    ],
    responses={200: NotificationSerializer(many=True)},
    description="List the current member's notifications, newest first.",
    tags=['notifications'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """List notifications - thin HTTP handler."""
    filter_serializer = NotificationFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)

    queryset = get_member_notifications(
        member=request.user,
        unread_only=filter_serializer.validated_data['unread']
    )

    paginator = NotificationPagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = NotificationSerializer(page, many=True)
    return paginator.get_paginated_response(serializer.data)


@extend_schema(
    request=None,
    responses={200: NotificationSerializer},
    description="Mark one notification as read.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_read(request, notification_id):
    try:
        notification = mark_as_read(notification_id=notification_id, member=request.user)
    except NotificationNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response(NotificationSerializer(notification).data)


@extend_schema(
    request=None,
    responses={200: MarkAllReadResponseSerializer},
    description="Mark all of the current member's notifications as read.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_all_read(request):
    updated = mark_all_as_read(member=request.user)
    return Response({'updated': updated})
