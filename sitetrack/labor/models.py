from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal


class Worker(models.Model):
    site = models.ForeignKey('sites.Site', on_delete=models.CASCADE, related_name='workers')
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=100)
    daily_wage = models.DecimalField(max_digits=10, decimal_places=2,
                                     validators=[MinValueValidator(Decimal('0'))])
    phone = models.CharField(max_length=20, blank=True, null=True)
    join_date = models.DateField(default=timezone.localdate)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.role})"

    class Meta:
        db_table = 'workers'
        ordering = ['name']


class Attendance(models.Model):
    worker = models.ForeignKey(Worker, on_delete=models.CASCADE, related_name='attendance')
    site = models.ForeignKey('sites.Site', on_delete=models.CASCADE, related_name='attendance')
    date = models.DateField(default=timezone.localdate)
    present = models.BooleanField(default=True)
    hours_worked = models.DecimalField(max_digits=5, decimal_places=2, blank=True, null=True,
                                       validators=[MinValueValidator(Decimal('0'))])
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.worker_id} on {self.date}: {'present' if self.present else 'absent'}"

    class Meta:
        db_table = 'attendance'
        ordering = ['-date', 'worker_id']
        indexes = [
            models.Index(fields=['site', 'date'], name='idx_attendance_site_date'),
        ]
