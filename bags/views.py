import logging
import uuid

from django.http import HttpResponse
from rest_framework import viewsets, permissions, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse, OpenApiExample
from drf_spectacular.types import OpenApiTypes

from core.permissions import IsAdmin, IsCollector, IsHousehold, IsReceiver, IsStaffRole
from .models import Bag, BagCode, CollectorReview
from .serializers import (
    ActivateBagSerializer, BagCodeSerializer, BagSerializer, CollectorReviewSerializer,
    GenerateCodesSerializer, ReceiverReviewSerializer, ReviewBagSerializer, VerifyReviewSerializer
)
from .services import activate_bag, codes_zip, find_bag, generate_codes, review_bag, verify_review

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "No bag found for this code. Check the code and try again."


class BagViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Households see the bags they activated. Staff can open any bag to
    review it; collectors normally reach a bag through `lookup`.
    """
    serializer_class = BagSerializer
    filterset_fields = ['status', 'category']

    def get_queryset(self):
        queryset = Bag.objects.select_related(
            'household', 'review__collector', 'review__receiver_review__receiver'
        )
        if getattr(self.request.user, 'role', None) == 'household':
            return queryset.filter(household=self.request.user)
        return queryset

    def get_permissions(self):
        if self.action == 'activate':
            return [permissions.IsAuthenticated(), IsHousehold()]
        if self.action == 'review':
            return [permissions.IsAuthenticated(), IsCollector()]
        if self.action == 'lookup':
            return [permissions.IsAuthenticated(), IsStaffRole()]
        return [permissions.IsAuthenticated()]

    @extend_schema(
        summary="Activate a bag by scanning its code",
        request=ActivateBagSerializer,
        responses={
            201: BagSerializer,
            200: OpenApiResponse(response=BagSerializer, description="Bag was already activated"),
            400: OpenApiResponse(description="Missing or malformed code"),
        },
        examples=[
            OpenApiExample("Bare code", value={"code": "WWR-1A2B3C4D"}, request_only=True),
            OpenApiExample("Scanned link", value={"code": "https://app.wastewise.ng/scan?code=WWO-99AA00BB"}, request_only=True),
        ],
    )
    @action(detail=False, methods=['post'])
    def activate(self, request):
        serializer = ActivateBagSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        bag, created = activate_bag(
            serializer.validated_data['code'],
            request.user,
            category=serializer.validated_data.get('category'),
        )
        data = BagSerializer(bag).data
        if created:
            return Response({'status': 'activated', 'bag': data}, status=status.HTTP_201_CREATED)
        return Response({'status': 'already_activated', 'bag': data}, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Find a bag by its code",
        parameters=[
            OpenApiParameter(name='code', description='Bag code or activation link', required=True, type=OpenApiTypes.STR),
        ],
        responses={200: BagSerializer, 404: OpenApiResponse(description=NOT_FOUND_MESSAGE)},
    )
    @action(detail=False, methods=['get'])
    def lookup(self, request):
        bag = find_bag(request.query_params.get('code', ''))
        if bag is None:
            return Response({'detail': NOT_FOUND_MESSAGE}, status=status.HTTP_404_NOT_FOUND)
        return Response(BagSerializer(bag).data)

    @extend_schema(
        summary="Approve or disapprove an activated bag",
        request=ReviewBagSerializer,
        responses={
            201: CollectorReviewSerializer,
            400: OpenApiResponse(description="Bag already reviewed or reason missing"),
        },
        examples=[
            OpenApiExample("Approve", value={"approve": True}, request_only=True),
            OpenApiExample(
                "Disapprove",
                value={"approve": False, "disapproval_reason": "Bag damaged or leaking", "notes": "Torn at the base"},
                request_only=True,
            ),
        ],
    )
    @action(detail=True, methods=['post'])
    def review(self, request, pk=None):
        bag = self.get_object()
        serializer = ReviewBagSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = review_bag(
            bag,
            request.user,
            approve=serializer.validated_data['approve'],
            reason=serializer.validated_data.get('disapproval_reason'),
            notes=serializer.validated_data.get('notes', ''),
        )
        return Response(CollectorReviewSerializer(review).data, status=status.HTTP_201_CREATED)


class CollectorReviewViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Collectors see their own reviews. Receivers and admins see all of them;
    `?pending_verification=true` narrows the list to reviews no receiver has
    verified yet.
    """
    serializer_class = CollectorReviewSerializer
    filterset_fields = ['status', 'bag__category']

    def get_queryset(self):
        queryset = CollectorReview.objects.select_related(
            'bag__household', 'collector', 'receiver_review__receiver'
        )
        if getattr(self.request.user, 'role', None) == 'collector':
            queryset = queryset.filter(collector=self.request.user)

        pending = self.request.query_params.get('pending_verification', '').lower()
        if pending in ('true', '1', 'yes'):
            queryset = queryset.filter(receiver_review__isnull=True)
        elif pending in ('false', '0', 'no'):
            queryset = queryset.filter(receiver_review__isnull=False)
        return queryset

    def get_permissions(self):
        if self.action == 'verify':
            return [permissions.IsAuthenticated(), IsReceiver()]
        return [permissions.IsAuthenticated(), IsStaffRole()]

    @extend_schema(
        summary="Verify a collector's review",
        request=VerifyReviewSerializer,
        responses={
            201: ReceiverReviewSerializer,
            400: OpenApiResponse(description="Review already verified"),
        },
    )
    @action(detail=True, methods=['post'])
    def verify(self, request, pk=None):
        collector_review = self.get_object()
        serializer = VerifyReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        verification = verify_review(
            collector_review,
            request.user,
            approve=serializer.validated_data['approve'],
            notes=serializer.validated_data.get('notes', ''),
        )
        return Response(ReceiverReviewSerializer(verification).data, status=status.HTTP_201_CREATED)


class BagCodeViewSet(viewsets.ReadOnlyModelViewSet):
    """Printable bag labels, generated in batches by admins."""
    queryset = BagCode.objects.all()
    serializer_class = BagCodeSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdmin]
    filterset_fields = ['category', 'batch']

    @extend_schema(
        summary="Generate a batch of bag codes",
        request=GenerateCodesSerializer,
        responses={201: BagCodeSerializer(many=True)},
        examples=[OpenApiExample("Fifty recyclable labels", value={"category": "recyclable", "count": 50}, request_only=True)],
    )
    @action(detail=False, methods=['post'])
    def generate(self, request):
        serializer = GenerateCodesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        batch, bag_codes = generate_codes(
            serializer.validated_data['category'],
            serializer.validated_data['count'],
            created_by=request.user,
        )
        return Response({
            'batch': str(batch),
            'codes': BagCodeSerializer(bag_codes, many=True).data,
        }, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Download a batch of QR labels as a ZIP of PNG images",
        parameters=[
            OpenApiParameter(name='batch', description='Batch UUID returned by generate', required=True, type=OpenApiTypes.UUID),
        ],
        responses={
            (200, 'application/zip'): OpenApiTypes.BINARY,
            404: OpenApiResponse(description="Unknown batch"),
        },
    )
    @action(detail=False, methods=['get'])
    def export(self, request):
        try:
            batch = uuid.UUID(request.query_params.get('batch', ''))
        except ValueError:
            return Response({'batch': ['A valid batch id is required.']}, status=status.HTTP_400_BAD_REQUEST)

        bag_codes = list(BagCode.objects.filter(batch=batch).order_by('code'))
        if not bag_codes:
            return Response({'detail': 'No codes found for this batch.'}, status=status.HTTP_404_NOT_FOUND)

        archive = codes_zip(bag_codes)
        response = HttpResponse(archive.getvalue(), content_type='application/zip')
        response['Content-Disposition'] = f'attachment; filename="bag-codes-{batch}.zip"'
        logger.info(f"Exported {len(bag_codes)} QR labels for batch {batch}")
        return response
