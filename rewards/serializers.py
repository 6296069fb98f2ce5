from rest_framework import serializers
from .models import Redemption, Reward
from .services import required_fields


class RewardSerializer(serializers.ModelSerializer):
    required_fields = serializers.SerializerMethodField()
    can_afford = serializers.SerializerMethodField()

    class Meta:
        model = Reward
        fields = [
            'id', 'title', 'description', 'points_cost', 'category',
            'icon', 'is_available', 'required_fields', 'can_afford'
        ]

    def get_required_fields(self, obj):
        return list(required_fields(obj))

    def get_can_afford(self, obj):
        request = self.context.get('request')
        user = getattr(request, 'user', None)
        if getattr(user, 'role', None) != 'household':
            return None
        return obj.is_available and user.points_balance >= obj.points_cost


class RedeemSerializer(serializers.Serializer):
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    meter_number = serializers.CharField(max_length=13, required=False, allow_blank=True)


class RedemptionSerializer(serializers.ModelSerializer):
    reward_title = serializers.CharField(source='reward.title', read_only=True)
    reward_category = serializers.CharField(source='reward.category', read_only=True)
    household_name = serializers.CharField(source='household.name', read_only=True)

    class Meta:
        model = Redemption
        fields = [
            'id', 'reward', 'reward_title', 'reward_category', 'household', 'household_name',
            'points_spent', 'status', 'confirmation_code', 'details', 'created_at'
        ]
        read_only_fields = fields
