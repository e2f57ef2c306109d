from django.contrib import admin
from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['site', 'category', 'amount', 'date', 'has_receipt']
    list_filter = ['site', 'category', 'has_receipt', 'date']
    search_fields = ['category', 'description']
    ordering = ['-date']
