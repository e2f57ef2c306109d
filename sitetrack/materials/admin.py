from django.contrib import admin
from .models import Material, MaterialTransaction


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ['name', 'site', 'category', 'quantity', 'unit', 'min_stock_level', 'last_updated']
    list_filter = ['site', 'category']
    search_fields = ['name', 'category']
    ordering = ['site', 'name']


@admin.register(MaterialTransaction)
class MaterialTransactionAdmin(admin.ModelAdmin):
    """Ledger entries are append-only, so the admin only displays them"""
    list_display = ['id', 'material_id', 'site', 'transaction_type', 'quantity', 'recorded_by', 'date']
    list_filter = ['transaction_type', 'site', 'date']
    search_fields = ['notes', 'recorded_by']
    ordering = ['-date']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
