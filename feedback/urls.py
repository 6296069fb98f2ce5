from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import HouseholdFeedbackViewSet

router = DefaultRouter()
router.register(r'feedback', HouseholdFeedbackViewSet, basename='household-feedback')

urlpatterns = [
    path('', include(router.urls)),
]
