from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal


class Expense(models.Model):
    site = models.ForeignKey('sites.Site', on_delete=models.CASCADE, related_name='expenses')
    category = models.CharField(max_length=100)
    amount = models.DecimalField(max_digits=12, decimal_places=2,
                                 validators=[MinValueValidator(Decimal('0'))])
    date = models.DateField(default=timezone.localdate)
    description = models.TextField(blank=True, null=True)
    has_receipt = models.BooleanField(default=False)
    receipt_url = models.URLField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.category} {self.amount} on {self.date}"

    class Meta:
        db_table = 'expenses'
        ordering = ['-date', '-id']
        indexes = [
            models.Index(fields=['site', '-date'], name='idx_expense_site_date'),
        ]
