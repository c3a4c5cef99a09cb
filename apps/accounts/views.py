from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .serializers import UserSerializer


@extend_schema(
    responses={200: UserSerializer},
    description="Get the current authenticated member's profile.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated member profile."""
    return Response(UserSerializer(request.user).data)


@extend_schema(
    request=UserSerializer,
    responses={200: UserSerializer},
    description="Update the current member's profile (names, mobile).",
    tags=['auth'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    """Update member profile."""
    serializer = UserSerializer(request.user, data=request.data, partial=True)

    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)

    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
