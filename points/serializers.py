from rest_framework import serializers
from .models import PointsLedgerEntry


class PointsLedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = PointsLedgerEntry
        fields = ['id', 'points', 'reason', 'reference', 'created_at']
        read_only_fields = fields


class PointsSummarySerializer(serializers.Serializer):
    points_balance = serializers.IntegerField()
    recent_entries = PointsLedgerEntrySerializer(many=True)
