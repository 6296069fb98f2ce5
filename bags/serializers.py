from rest_framework import serializers
from .models import Bag, BagCode, CollectorReview, ReceiverReview, CATEGORY_CHOICES, DISAPPROVAL_REASONS
from .services import MAX_CODES_PER_BATCH, activation_url


class ReceiverReviewSerializer(serializers.ModelSerializer):
    receiver_name = serializers.CharField(source='receiver.name', read_only=True)

    class Meta:
        model = ReceiverReview
        fields = ['id', 'receiver', 'receiver_name', 'status', 'notes', 'reviewed_at']
        read_only_fields = fields


class ReviewStateSerializer(serializers.ModelSerializer):
    """Collector review as embedded in a bag."""
    collector_name = serializers.CharField(source='collector.name', read_only=True)
    receiver_review = ReceiverReviewSerializer(read_only=True)

    class Meta:
        model = CollectorReview
        fields = [
            'id', 'collector_name', 'status', 'points_awarded',
            'disapproval_reason', 'notes', 'reviewed_at', 'receiver_review'
        ]
        read_only_fields = fields


class BagSerializer(serializers.ModelSerializer):
    household_name = serializers.CharField(source='household.name', read_only=True)
    household_location = serializers.CharField(source='household.location', read_only=True)
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    points_value = serializers.IntegerField(read_only=True)
    review = serializers.SerializerMethodField()

    class Meta:
        model = Bag
        fields = [
            'id', 'qr_code', 'category', 'category_display', 'status', 'points_value',
            'household', 'household_name', 'household_location', 'activated_at', 'review'
        ]
        read_only_fields = fields

    def get_review(self, obj):
        review = getattr(obj, 'review', None)
        if review is None:
            return None
        return ReviewStateSerializer(review).data


class CollectorReviewSerializer(serializers.ModelSerializer):
    bag = serializers.SerializerMethodField()
    collector_name = serializers.CharField(source='collector.name', read_only=True)
    receiver_review = serializers.SerializerMethodField()

    class Meta:
        model = CollectorReview
        fields = [
            'id', 'bag', 'collector', 'collector_name', 'status', 'points_awarded',
            'disapproval_reason', 'notes', 'reviewed_at', 'receiver_review'
        ]
        read_only_fields = fields

    def get_bag(self, obj):
        bag = obj.bag
        return {
            'id': bag.id,
            'qr_code': bag.qr_code,
            'category': bag.category,
            'status': bag.status,
            'household_name': bag.household.name,
            'household_location': bag.household.location,
            'activated_at': bag.activated_at,
        }

    def get_receiver_review(self, obj):
        try:
            return ReceiverReviewSerializer(obj.receiver_review).data
        except ReceiverReview.DoesNotExist:
            return None


class ActivateBagSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=500, help_text="The scanned code or activation link")
    category = serializers.ChoiceField(choices=CATEGORY_CHOICES, required=False)


class ReviewBagSerializer(serializers.Serializer):
    approve = serializers.BooleanField()
    disapproval_reason = serializers.ChoiceField(
        choices=[(reason, reason) for reason in DISAPPROVAL_REASONS],
        required=False,
        allow_blank=True
    )
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def validate(self, data):
        if not data['approve'] and not data.get('disapproval_reason'):
            raise serializers.ValidationError({"disapproval_reason": "A reason is required when disapproving a bag."})
        return data


class VerifyReviewSerializer(serializers.Serializer):
    approve = serializers.BooleanField(help_text="True when the receiver agrees with the collector")
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class BagCodeSerializer(serializers.ModelSerializer):
    activation_url = serializers.SerializerMethodField()

    class Meta:
        model = BagCode
        fields = ['id', 'code', 'category', 'batch', 'activation_url', 'created_at']
        read_only_fields = fields

    def get_activation_url(self, obj):
        return activation_url(obj.code)


class GenerateCodesSerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=CATEGORY_CHOICES)
    count = serializers.IntegerField(min_value=1, max_value=MAX_CODES_PER_BATCH)
