from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import RedemptionViewSet, RewardViewSet

router = DefaultRouter()
router.register(r'rewards', RewardViewSet, basename='reward')
router.register(r'redemptions', RedemptionViewSet, basename='redemption')

urlpatterns = [
    path('', include(router.urls)),
]
