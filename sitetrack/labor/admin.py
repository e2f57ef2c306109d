from django.contrib import admin
from .models import Worker, Attendance


@admin.register(Worker)
class WorkerAdmin(admin.ModelAdmin):
    list_display = ['name', 'site', 'role', 'daily_wage', 'phone', 'join_date']
    list_filter = ['site', 'role']
    search_fields = ['name', 'role', 'phone']
    ordering = ['name']


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ['worker', 'site', 'date', 'present', 'hours_worked']
    list_filter = ['site', 'present', 'date']
    search_fields = ['worker__name', 'notes']
    ordering = ['-date']
