import logging

from django.utils import timezone
from rest_framework import viewsets, permissions, filters, mixins, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiExample

from core.permissions import IsAdmin, IsHousehold
from core.tasks import notify
from .models import HouseholdFeedback
from .serializers import FeedbackResponseSerializer, HouseholdFeedbackSerializer

logger = logging.getLogger(__name__)


def _is_admin(user):
    return user.is_superuser or getattr(user, 'role', None) == 'admin'


class HouseholdFeedbackViewSet(mixins.CreateModelMixin,
                               mixins.ListModelMixin,
                               mixins.RetrieveModelMixin,
                               viewsets.GenericViewSet):
    """
    Households send feedback and read the replies to their own messages.
    Admins see every message and respond to it.
    """
    serializer_class = HouseholdFeedbackSerializer
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['subject', 'message']
    ordering_fields = ['created_at', 'status']

    def get_queryset(self):
        queryset = HouseholdFeedback.objects.select_related('household', 'responded_by')
        user = self.request.user
        if not _is_admin(user):
            queryset = queryset.filter(household=user)
        feedback_status = self.request.query_params.get('status')
        if feedback_status:
            queryset = queryset.filter(status=feedback_status)
        return queryset

    def get_permissions(self):
        if self.action == 'create':
            return [permissions.IsAuthenticated(), IsHousehold()]
        if self.action == 'respond':
            return [permissions.IsAuthenticated(), IsAdmin()]
        return [permissions.IsAuthenticated()]

    @extend_schema(
        examples=[
            OpenApiExample(
                "Missed pickup",
                value={"subject": "Missed pickup", "message": "No collector came on Tuesday."},
                request_only=True,
            ),
        ],
    )
    def create(self, request, *args, **kwargs):
        return super().create(request, *args, **kwargs)

    def perform_create(self, serializer):
        feedback = serializer.save(household=self.request.user)
        logger.info(f"Feedback {feedback.pk} submitted by user {self.request.user.pk}")

    @extend_schema(
        summary="Respond to a feedback message",
        request=FeedbackResponseSerializer,
        responses={status.HTTP_200_OK: HouseholdFeedbackSerializer},
    )
    @action(detail=True, methods=['post'])
    def respond(self, request, pk=None):
        feedback = self.get_object()
        serializer = FeedbackResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        feedback.admin_response = serializer.validated_data['admin_response']
        feedback.status = 'reviewed'
        feedback.responded_by = request.user
        feedback.responded_at = timezone.now()
        feedback.save(update_fields=['admin_response', 'status', 'responded_by', 'responded_at'])

        notify(
            recipient_id=feedback.household_id,
            notification_type='feedback_response',
            title="Reply to your feedback",
            message=f"We replied to \"{feedback.subject}\".",
            data={'feedback_id': feedback.pk},
        )
        logger.info(f"Feedback {feedback.pk} answered by admin {request.user.pk}")
        return Response(HouseholdFeedbackSerializer(feedback).data)
