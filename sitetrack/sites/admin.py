from django.contrib import admin
from .models import Site


@admin.register(Site)
class SiteAdmin(admin.ModelAdmin):
    list_display = ['name', 'location', 'status', 'start_date', 'expected_end_date', 'created_at']
    list_filter = ['status', 'start_date']
    search_fields = ['name', 'location']
    ordering = ['name']
