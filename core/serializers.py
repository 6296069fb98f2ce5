from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from django.contrib.auth import get_user_model
from .models import Notification
from .services import validate_staff_email
from .validators import normalize_phone, validate_password_strength

User = get_user_model()


def tokens_for(user):
    refresh = CustomTokenObtainPairSerializer.get_token(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'phone', 'location', 'role', 'points_balance', 'date_joined']
        read_only_fields = ['id', 'email', 'phone', 'role', 'points_balance', 'date_joined']


class IdentitySerializer(serializers.Serializer):
    profile = ProfileSerializer(read_only=True)
    role = serializers.CharField(read_only=True)


class PhoneSignInSerializer(serializers.Serializer):
    phone = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_phone(self, value):
        return normalize_phone(value)


class StaffSignUpSerializer(serializers.ModelSerializer):
    confirm_password = serializers.CharField(write_only=True, required=True)
    role = serializers.ChoiceField(choices=[('collector', 'Collector'), ('receiver', 'Receiver')])

    class Meta:
        model = User
        fields = ('id', 'email', 'password', 'confirm_password', 'name', 'location', 'role')
        extra_kwargs = {
            'password': {
                'write_only': True,
                'required': True,
                'style': {'input_type': 'password'}
            },
            'name': {'required': True},
        }

    def validate_password(self, value):
        return validate_password_strength(value)

    def validate(self, data):
        if data['password'] != data['confirm_password']:
            raise serializers.ValidationError({"confirm_password": "Passwords do not match"})
        data['email'] = validate_staff_email(data['email'], data['role'])
        return data

    def create(self, validated_data):
        validated_data.pop('confirm_password')
        return User.objects.create_user(**validated_data)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data.update(tokens_for(instance))
        return data


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        """Add role and profile basics to the token response"""
        data = super().validate(attrs)
        data.update({
            'role': self.user.role,
            'name': self.user.name,
            'points_balance': self.user.points_balance,
        })
        return data

    @classmethod
    def get_token(cls, user):
        """Add role to the token claims"""
        token = super().get_token(user)
        token['role'] = user.role
        return token


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'notification_type', 'title', 'message', 'data', 'is_read', 'created_at']
        read_only_fields = fields
