"""
URL configuration for the paddock project.
"""

from django.conf import settings
from django.contrib import admin
from django.urls import include, path

from core.views import dashboard, health_check

urlpatterns = [
    path('_health/', health_check, name='health_check'),
    path('admin/', admin.site.urls),
    path('api/', include('core.urls')),
    path('api/', include('health.urls')),
    path('', dashboard, name='dashboard'),
]

if settings.DEBUG:
    # Debug toolbar
    import debug_toolbar
    urlpatterns = [
        path('__debug__/', include(debug_toolbar.urls)),
    ] + urlpatterns
