from rest_framework import viewsets, permissions, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiResponse, OpenApiExample

from core.permissions import IsAdmin, IsHousehold
from .models import Redemption, Reward
from .serializers import RedeemSerializer, RedemptionSerializer, RewardSerializer
from .services import redeem


class RewardViewSet(viewsets.ModelViewSet):
    """Reward catalog. Everyone signed in can browse; admins maintain it."""
    serializer_class = RewardSerializer
    filterset_fields = ['category', 'is_available']

    def get_queryset(self):
        if getattr(self.request.user, 'role', None) == 'admin' or self.request.user.is_superuser:
            return Reward.objects.all()
        return Reward.objects.filter(is_available=True)

    def get_permissions(self):
        if self.action in ['create', 'update', 'partial_update', 'destroy']:
            return [permissions.IsAuthenticated(), IsAdmin()]
        if self.action == 'redeem':
            return [permissions.IsAuthenticated(), IsHousehold()]
        return [permissions.IsAuthenticated()]

    def perform_destroy(self, instance):
        # Redeemed rewards are kept for history; retire them instead
        if instance.redemptions.exists():
            instance.is_available = False
            instance.save(update_fields=['is_available'])
        else:
            instance.delete()

    @extend_schema(
        summary="Redeem a reward with points",
        request=RedeemSerializer,
        responses={
            201: RedemptionSerializer,
            400: OpenApiResponse(description="Missing inputs, unavailable reward or insufficient points"),
        },
        examples=[
            OpenApiExample("Airtime", value={"phone_number": "08031234567"}, request_only=True),
            OpenApiExample("Electricity token", value={"meter_number": "45012345678"}, request_only=True),
        ],
    )
    @action(detail=True, methods=['post'])
    def redeem(self, request, pk=None):
        reward = self.get_object()
        serializer = RedeemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        redemption = redeem(request.user, reward, serializer.validated_data)
        request.user.refresh_from_db(fields=['points_balance'])
        data = RedemptionSerializer(redemption).data
        data['points_balance'] = request.user.points_balance
        return Response(data, status=status.HTTP_201_CREATED)


class RedemptionViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = RedemptionSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ['reward', 'reward__category']

    def get_queryset(self):
        queryset = Redemption.objects.select_related('reward', 'household')
        user = self.request.user
        if getattr(user, 'role', None) == 'admin' or user.is_superuser:
            return queryset
        return queryset.filter(household=user)
