"""
URL configuration for the sitetrack project.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "SiteTrack Admin Panel"
admin.site.site_title = "SiteTrack Admin Portal"
admin.site.index_title = "Construction Site Management"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('sitetrack.core.urls')),
    path('api/v1/', include('sitetrack.sites.urls')),
    path('api/v1/', include('sitetrack.materials.urls')),
    path('api/v1/', include('sitetrack.labor.urls')),
    path('api/v1/', include('sitetrack.expenses.urls')),
    path('api/v1/', include('sitetrack.journal.urls')),
    path('api/v1/', include('sitetrack.reports.urls')),
]
