from rest_framework import generics, permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema

from core.permissions import IsHousehold
from .models import PointsLedgerEntry
from .serializers import PointsLedgerEntrySerializer, PointsSummarySerializer

RECENT_ENTRIES = 5


class PointsSummaryView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsHousehold]

    @extend_schema(responses={200: PointsSummarySerializer}, summary="Current balance and latest movements")
    def get(self, request):
        entries = PointsLedgerEntry.objects.filter(household=request.user)[:RECENT_ENTRIES]
        request.user.refresh_from_db(fields=['points_balance'])
        serializer = PointsSummarySerializer({
            'points_balance': request.user.points_balance,
            'recent_entries': entries,
        })
        return Response(serializer.data)


class PointsHistoryView(generics.ListAPIView):
    serializer_class = PointsLedgerEntrySerializer
    permission_classes = [permissions.IsAuthenticated, IsHousehold]

    def get_queryset(self):
        return PointsLedgerEntry.objects.filter(household=self.request.user)
