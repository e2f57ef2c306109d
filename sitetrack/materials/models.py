from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal


class Material(models.Model):
    """Inventory item on a site; quantity is the running total of its transactions"""
    site = models.ForeignKey('sites.Site', on_delete=models.CASCADE, related_name='materials')
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=100)
    unit = models.CharField(max_length=50)
    quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0'),
                                   validators=[MinValueValidator(Decimal('0'))])
    min_stock_level = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0'),
                                          validators=[MinValueValidator(Decimal('0'))])
    # Ledger adjustments use queryset.update(), which bypasses auto_now, so they set it explicitly
    last_updated = models.DateTimeField(auto_now=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} ({self.quantity} {self.unit})"

    class Meta:
        db_table = 'materials'
        ordering = ['name']
        indexes = [
            models.Index(fields=['site', 'category'], name='idx_material_site_category'),
        ]


class MaterialTransaction(models.Model):
    """Append-only stock movement; never updated after creation"""
    TRANSACTION_TYPES = [
        ('added', 'Added'),
        ('used', 'Used'),
    ]

    # No database constraint and no cascade: deleting a material leaves its history in place
    material = models.ForeignKey(Material, on_delete=models.DO_NOTHING, db_constraint=False,
                                 related_name='transactions')
    site = models.ForeignKey('sites.Site', on_delete=models.CASCADE, related_name='material_transactions')
    date = models.DateTimeField(default=timezone.now)
    transaction_type = models.CharField(max_length=10, choices=TRANSACTION_TYPES)
    quantity = models.DecimalField(max_digits=12, decimal_places=3,
                                   validators=[MinValueValidator(Decimal('0.001'))])
    notes = models.TextField(blank=True, default='')
    recorded_by = models.CharField(max_length=150, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.transaction_type} {self.quantity} of material #{self.material_id}"

    class Meta:
        db_table = 'material_transactions'
        ordering = ['-date', '-id']
        indexes = [
            models.Index(fields=['site', '-date'], name='idx_txn_site_date'),
            models.Index(fields=['material', '-date'], name='idx_txn_material_date'),
        ]
