"""
URL configuration for PublishDesk project.
"""

from django.contrib import admin
from django.urls import path, include

from apps.core.urls import auth_urlpatterns

urlpatterns = [
    path('admin/', admin.site.urls),
    # Auth endpoints
    path('api/auth/', include((auth_urlpatterns, 'auth'))),
    # Editorial workflow API
    path('api/', include('apps.articles.urls')),
    # Health endpoints
    path('', include('apps.core.urls')),
]

# Customize admin site
admin.site.site_header = "PublishDesk Administration"
admin.site.site_title = "PublishDesk Admin Portal"
admin.site.index_title = "Welcome to PublishDesk Administration"
