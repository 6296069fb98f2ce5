import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import permissions, status
from rest_framework.negotiation import DefaultContentNegotiation
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from drf_spectacular.types import OpenApiTypes

from bags.models import Bag, CollectorReview, ReceiverReview
from core.permissions import IsAdmin
from .exports import users_csv, users_xlsx
from .reporting import build_snapshot, collector_accuracy, recent_activity

logger = logging.getLogger(__name__)
User = get_user_model()

EXPORT_ROLES = ('household', 'collector', 'receiver')
EXPORT_FORMATS = {
    'csv': 'text/csv',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
}


class DashboardOverviewView(APIView):
    """Everything the admin dashboard shows, computed in one pass."""
    permission_classes = [permissions.IsAuthenticated, IsAdmin]

    @extend_schema(responses={200: OpenApiTypes.OBJECT}, summary="Dashboard overview")
    def get(self, request):
        return Response(build_snapshot())


class CollectorAccuracyView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsAdmin]

    @extend_schema(responses={200: OpenApiTypes.OBJECT}, summary="Per-collector accuracy from receiver verdicts")
    def get(self, request):
        reviews = CollectorReview.objects.select_related('collector')
        verdicts = ReceiverReview.objects.all()
        return Response({'collectors': collector_accuracy(reviews, verdicts)})


class RecentActivityView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsAdmin]

    @extend_schema(
        parameters=[
            OpenApiParameter(name='limit', description='Number of events (default from settings)', required=False, type=OpenApiTypes.INT),
        ],
        responses={200: OpenApiTypes.OBJECT},
        summary="Latest activations, reviews, verifications and sign-ups",
    )
    def get(self, request):
        try:
            limit = int(request.query_params.get('limit', settings.DASHBOARD_ACTIVITY_LIMIT))
        except (TypeError, ValueError):
            return Response({'detail': 'limit must be an integer.'}, status=status.HTTP_400_BAD_REQUEST)
        if limit <= 0:
            return Response({'detail': 'limit must be positive.'}, status=status.HTTP_400_BAD_REQUEST)

        events = recent_activity(
            Bag.objects.all(),
            CollectorReview.objects.select_related('collector', 'bag'),
            ReceiverReview.objects.select_related('receiver'),
            User.objects.exclude(role='admin'),
            limit,
        )
        return Response({'events': events})


class IgnoreFormatNegotiation(DefaultContentNegotiation):
    """Leaves `?format=` to the view instead of treating it as a renderer override."""

    def select_renderer(self, request, renderers, format_suffix=None):
        return (renderers[0], renderers[0].media_type)


class UserExportView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsAdmin]
    content_negotiation_class = IgnoreFormatNegotiation

    @extend_schema(
        parameters=[
            OpenApiParameter(name='role', description='household, collector or receiver', required=False, type=OpenApiTypes.STR),
            OpenApiParameter(name='format', description='csv (default) or xlsx', required=False, type=OpenApiTypes.STR),
        ],
        responses={
            (200, 'text/csv'): OpenApiTypes.BINARY,
            400: OpenApiResponse(description="Unknown role or format"),
        },
        summary="Download the user list",
    )
    def get(self, request):
        role = request.query_params.get('role', 'household')
        export_format = request.query_params.get('format', 'csv')
        if role not in EXPORT_ROLES:
            return Response({'role': [f"Role must be one of: {', '.join(EXPORT_ROLES)}."]}, status=status.HTTP_400_BAD_REQUEST)
        if export_format not in EXPORT_FORMATS:
            return Response({'format': ["Format must be csv or xlsx."]}, status=status.HTTP_400_BAD_REQUEST)

        users = User.objects.filter(role=role).order_by('name')
        if export_format == 'xlsx':
            content = users_xlsx(users, title=f"{role.title()}s")
        else:
            content = users_csv(users)

        filename = f"{role}s-{timezone.now():%Y%m%d}.{export_format}"
        response = HttpResponse(content, content_type=EXPORT_FORMATS[export_format])
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        logger.info(f"User export ({role}, {export_format}) downloaded by admin {request.user.pk}")
        return response
