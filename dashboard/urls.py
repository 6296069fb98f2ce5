from django.urls import path
from .views import CollectorAccuracyView, DashboardOverviewView, RecentActivityView, UserExportView

app_name = 'dashboard'

urlpatterns = [
    path('overview/', DashboardOverviewView.as_view(), name='overview'),
    path('collectors/', CollectorAccuracyView.as_view(), name='collectors'),
    path('activity/', RecentActivityView.as_view(), name='activity'),
    path('users/export/', UserExportView.as_view(), name='users_export'),
]
