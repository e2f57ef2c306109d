"""
Django management command to compare stored material quantities with their
transaction history and report clamps and orphaned transactions
"""
import json
from django.core.management.base import BaseCommand
from django.db.models import Count, Q, Sum
from decimal import Decimal
from sitetrack.core.models import AuditLog
from sitetrack.materials.ledger import classify_stock
from sitetrack.materials.models import Material, MaterialTransaction


class Command(BaseCommand):
    help = 'Show stored material quantities next to their transaction ledger (read-only)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--material-id',
            type=int,
            help='Check specific material ID only',
        )
        parser.add_argument(
            '--site-id',
            type=int,
            help='Check materials of one site only',
        )
        parser.add_argument(
            '--show-all',
            action='store_true',
            help='Show all materials, not just low stock or ones with transactions',
        )
        parser.add_argument(
            '--audit-limit',
            type=int,
            default=20,
            help='Number of recent stock clamp audit logs to show (default: 20)',
        )

    def handle(self, *args, **options):
        material_id = options.get('material_id')
        site_id = options.get('site_id')
        show_all = options.get('show_all', False)
        audit_limit = options.get('audit_limit', 20)

        self.stdout.write("=" * 80)
        self.stdout.write(self.style.SUCCESS("MATERIAL STOCK vs TRANSACTION LEDGER"))
        self.stdout.write("=" * 80)
        self.stdout.write("")

        materials = Material.objects.select_related('site').order_by('site_id', 'id')
        if material_id:
            materials = materials.filter(id=material_id)
        if site_id:
            materials = materials.filter(site_id=site_id)

        self.stdout.write(f"Total Materials: {materials.count()}")
        self.stdout.write("")

        low_stock = []
        for material in materials:
            summary = MaterialTransaction.objects.filter(material_id=material.id).aggregate(
                count=Count('id'),
                added=Sum('quantity', filter=Q(transaction_type='added')),
                used=Sum('quantity', filter=Q(transaction_type='used')),
            )
            added = summary['added'] or Decimal('0')
            used = summary['used'] or Decimal('0')
            net = added - used
            stock_status = classify_stock(material.quantity, material.min_stock_level)
            if stock_status != 'sufficient':
                low_stock.append((material, stock_status))

            if not (show_all or summary['count'] or stock_status != 'sufficient'):
                continue

            self.stdout.write(f"Material: {material.name} (ID: {material.id}, Site: {material.site.name})")
            self.stdout.write(f"  Stored Quantity: {material.quantity} {material.unit}")
            self.stdout.write(f"  Minimum Level: {material.min_stock_level} {material.unit}")
            self.stdout.write(f"  Transactions: {summary['count']}")
            self.stdout.write(f"    - Added: {added}")
            self.stdout.write(f"    - Used: {used}")
            self.stdout.write(f"  Net Movement: {net:+}")
            if stock_status == 'sufficient':
                self.stdout.write(self.style.SUCCESS(f"  Stock Status: {stock_status}"))
            else:
                self.stdout.write(self.style.WARNING(f"  Stock Status: {stock_status}"))
            self.stdout.write("")

        self.stdout.write("=" * 80)
        self.stdout.write(self.style.SUCCESS("LOW STOCK SUMMARY"))
        self.stdout.write("=" * 80)
        if low_stock:
            for material, stock_status in low_stock:
                self.stdout.write(self.style.WARNING(
                    f"  - {material.name} (ID: {material.id}): {material.quantity} / "
                    f"{material.min_stock_level} {material.unit} [{stock_status}]"
                ))
        else:
            self.stdout.write(self.style.SUCCESS("No materials below their minimum level"))
        self.stdout.write("")

        self.stdout.write("=" * 80)
        self.stdout.write(self.style.SUCCESS("ORPHANED TRANSACTIONS"))
        self.stdout.write("=" * 80)
        orphans = MaterialTransaction.objects.exclude(
            material_id__in=Material.objects.values('id')
        ).order_by('material_id', '-date')
        if material_id:
            orphans = orphans.filter(material_id=material_id)
        if site_id:
            orphans = orphans.filter(site_id=site_id)

        if orphans.exists():
            self.stdout.write(self.style.WARNING(f"Transactions whose material was deleted: {orphans.count()}"))
            for txn in orphans:
                self.stdout.write(
                    f"  [{txn.date.strftime('%Y-%m-%d %H:%M:%S')}] #{txn.id} material {txn.material_id}: "
                    f"{txn.transaction_type} {txn.quantity}"
                )
        else:
            self.stdout.write(self.style.SUCCESS("No orphaned transactions"))
        self.stdout.write("")

        self.stdout.write("=" * 80)
        self.stdout.write(self.style.SUCCESS("RECENT STOCK CLAMPS"))
        self.stdout.write("=" * 80)
        clamp_logs = AuditLog.objects.filter(action='stock_clamped')
        if material_id:
            clamp_logs = clamp_logs.filter(object_id=str(material_id))
        if site_id:
            clamp_logs = clamp_logs.filter(site_id=site_id)
        clamp_logs = clamp_logs.order_by('-created_at')[:audit_limit]

        if clamp_logs:
            for log in clamp_logs:
                self.stdout.write(f"[{log.created_at.strftime('%Y-%m-%d %H:%M:%S')}] {log.object_name or log.object_id}")
                if log.changes:
                    self.stdout.write(f"  Changes: {json.dumps(log.changes, indent=4)}")
        else:
            self.stdout.write("  No stock clamps recorded.")
        self.stdout.write("")

        self.stdout.write("=" * 80)
        self.stdout.write(self.style.SUCCESS("ANALYSIS COMPLETE"))
        self.stdout.write("=" * 80)
