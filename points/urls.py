from django.urls import path
from .views import PointsHistoryView, PointsSummaryView

urlpatterns = [
    path('me/', PointsSummaryView.as_view(), name='points-summary'),
    path('history/', PointsHistoryView.as_view(), name='points-history'),
]
