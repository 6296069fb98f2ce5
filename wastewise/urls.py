from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/schema/swagger-ui/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/schema/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
    path('django-rq/', include('django_rq.urls')),
    path('api/core/', include('core.urls')),
    path('api/bags/', include('bags.urls')),
    path('api/points/', include('points.urls')),
    path('api/rewards/', include('rewards.urls')),
    path('api/feedback/', include('feedback.urls')),
    path('api/dashboard/', include('dashboard.urls')),
    path('api/advisor/', include('advisor.urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
