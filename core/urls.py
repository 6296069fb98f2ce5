from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView, TokenVerifyView
from .views import (
    CustomTokenObtainPairView, NotificationViewSet, PhoneSignInView, StaffSignUpView, UserProfileView
)

router = DefaultRouter()
router.register(r'notifications', NotificationViewSet, basename='notification')

urlpatterns = [
    path('auth/phone/', PhoneSignInView.as_view(), name='phone-sign-in'),
    path('auth/staff/signup/', StaffSignUpView.as_view(), name='staff-sign-up'),
    path('auth/jwt/create/', CustomTokenObtainPairView.as_view(), name='jwt-create'),
    path('auth/jwt/refresh/', TokenRefreshView.as_view(), name='jwt-refresh'),
    path('auth/jwt/verify/', TokenVerifyView.as_view(), name='jwt-verify'),
    path('profile/me/', UserProfileView.as_view(), name='user-profile'),
    path('', include(router.urls)),
]
