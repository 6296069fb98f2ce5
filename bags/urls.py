from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import BagCodeViewSet, BagViewSet, CollectorReviewViewSet

router = DefaultRouter()
router.register(r'bags', BagViewSet, basename='bag')
router.register(r'reviews', CollectorReviewViewSet, basename='collector-review')
router.register(r'codes', BagCodeViewSet, basename='bag-code')

urlpatterns = [
    path('', include(router.urls)),
]
