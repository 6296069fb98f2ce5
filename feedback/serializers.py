from rest_framework import serializers
from .models import HouseholdFeedback


class HouseholdFeedbackSerializer(serializers.ModelSerializer):
    household_name = serializers.CharField(source='household.name', read_only=True)
    responded_by_name = serializers.CharField(source='responded_by.name', read_only=True, default=None)

    class Meta:
        model = HouseholdFeedback
        fields = [
            'id', 'household', 'household_name', 'subject', 'message', 'status',
            'admin_response', 'responded_by_name', 'responded_at', 'created_at'
        ]
        read_only_fields = [
            'id', 'household', 'household_name', 'status',
            'admin_response', 'responded_by_name', 'responded_at', 'created_at'
        ]

    def validate_subject(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Subject cannot be blank.")
        return value

    def validate_message(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Message cannot be blank.")
        return value


class FeedbackResponseSerializer(serializers.Serializer):
    admin_response = serializers.CharField(max_length=2000)

    def validate_admin_response(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Response cannot be blank.")
        return value
