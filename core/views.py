from rest_framework import viewsets, permissions, filters, status, generics
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView
from drf_spectacular.utils import extend_schema, OpenApiResponse, OpenApiExample, inline_serializer
from rest_framework import serializers
from django.contrib.auth import get_user_model
import logging

from .models import Notification
from .serializers import (
    CustomTokenObtainPairSerializer, IdentitySerializer, NotificationSerializer,
    PhoneSignInSerializer, ProfileSerializer, StaffSignUpSerializer, tokens_for
)
from .services import resolve_identity, sign_in_with_phone
from .signals import push_counter_sync
from .throttles import LoginRateThrottle

logger = logging.getLogger(__name__)
User = get_user_model()


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer
    throttle_classes = [LoginRateThrottle]


class PhoneSignInView(APIView):
    """
    Households sign in with their phone number. The first sign-in creates
    the account, so `name` is required the first time.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    throttle_classes = [LoginRateThrottle]

    @extend_schema(
        request=PhoneSignInSerializer,
        responses={
            200: inline_serializer(
                name="PhoneSignInResponse",
                fields={
                    "access": serializers.CharField(),
                    "refresh": serializers.CharField(),
                    "created": serializers.BooleanField(),
                    "role": serializers.CharField(),
                    "profile": ProfileSerializer(),
                },
            ),
            400: OpenApiResponse(description="Invalid phone number or missing name for a new account"),
        },
        examples=[
            OpenApiExample(
                "New household",
                value={"phone": "08031234567", "name": "Ada Obi", "location": "Yaba, Lagos"},
                request_only=True,
            ),
        ],
    )
    def post(self, request):
        serializer = PhoneSignInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, created = sign_in_with_phone(**serializer.validated_data)
        return Response({
            **tokens_for(user),
            'created': created,
            'role': user.role,
            'profile': ProfileSerializer(user).data,
        }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class StaffSignUpView(generics.CreateAPIView):
    """Collector and receiver registration restricted to organisation email domains."""
    serializer_class = StaffSignUpSerializer
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    throttle_classes = [LoginRateThrottle]

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info(f"{user.role.title()} account created: {user.email}")


class UserProfileView(APIView):
    @extend_schema(
        responses={
            200: IdentitySerializer,
            404: OpenApiResponse(description="Profile not provisioned"),
        },
        summary="Resolve the signed-in user's profile and role",
    )
    def get(self, request):
        identity = resolve_identity(request.user)
        if identity is None:
            return Response({'detail': 'Profile not provisioned.'}, status=status.HTTP_404_NOT_FOUND)
        return Response(IdentitySerializer(identity).data)

    @extend_schema(request=ProfileSerializer, responses={200: ProfileSerializer})
    def patch(self, request):
        if resolve_identity(request.user) is None:
            return Response({'detail': 'Profile not provisioned.'}, status=status.HTTP_404_NOT_FOUND)
        serializer = ProfileSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class NotificationViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ['created_at', 'is_read']
    ordering = ['-created_at']

    def get_queryset(self):
        return Notification.objects.filter(recipient=self.request.user)

    @extend_schema(
        summary="Mark one notification as read",
        request=None,
        responses={200: OpenApiResponse(description="Notification marked as read")},
    )
    @action(detail=True, methods=['post'])
    def mark_read(self, request, pk=None):
        notification = self.get_object()
        notification.is_read = True
        notification.save()
        return Response({'status': 'marked as read'})

    @extend_schema(
        summary="Mark all notifications as read",
        request=None,
        responses={200: OpenApiResponse(description="All notifications marked as read")},
    )
    @action(detail=False, methods=['post'])
    def mark_all_read(self, request):
        affected = self.get_queryset().filter(is_read=False).update(is_read=True)
        if affected:
            push_counter_sync(request.user.id)
        return Response({'status': 'all marked as read', 'updated': affected})

    @action(detail=False, methods=['get'], url_path='unread_count')
    def unread_count(self, request):
        count = self.get_queryset().filter(is_read=False).count()
        return Response({'unread_count': count})
