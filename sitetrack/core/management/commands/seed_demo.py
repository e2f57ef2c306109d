"""
Create the default admin account and a sample site with materials, workers and expenses
"""
from datetime import date
from decimal import Decimal
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from sitetrack.expenses.models import Expense
from sitetrack.labor.models import Worker
from sitetrack.materials.models import Material
from sitetrack.sites.models import Site

User = get_user_model()

DEMO_SITE = {
    'name': 'Dhaka Residence',
    'location': 'Gulshan, Dhaka',
    'description': 'A residential building project in Gulshan',
    'start_date': date(2023, 9, 1),
    'expected_end_date': date(2024, 6, 30),
    'status': 'ongoing',
}

DEMO_MATERIALS = [
    {'name': 'Cement (OPC)', 'category': 'Cement', 'unit': 'Bags', 'quantity': '15', 'min_stock_level': '50'},
    {'name': 'Sand (Coarse)', 'category': 'Sand', 'unit': 'CFT', 'quantity': '120', 'min_stock_level': '200'},
    {'name': 'Steel Rods (10mm)', 'category': 'Steel', 'unit': 'Kg', 'quantity': '850', 'min_stock_level': '500'},
]

DEMO_WORKERS = [
    {'name': 'Abdul Karim', 'role': 'Mason', 'daily_wage': '800', 'phone': '01711223344'},
    {'name': 'Mohammad Ali', 'role': 'Helper', 'daily_wage': '500', 'phone': '01811223344'},
]

DEMO_EXPENSES = [
    {'category': 'Materials', 'amount': '25750', 'description': 'Cement purchase'},
    {'category': 'Labor', 'amount': '12000', 'description': 'Weekly labor payment'},
]


class Command(BaseCommand):
    help = 'Seed the admin user (admin/admin123) and the Dhaka Residence demo site; safe to run repeatedly'

    def add_arguments(self, parser):
        parser.add_argument(
            '--admin-password',
            default='admin123',
            help='Password for a newly created admin user (default: admin123)',
        )
        parser.add_argument(
            '--skip-site',
            action='store_true',
            help='Only create the admin user',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        admin, created = User.objects.get_or_create(
            username='admin',
            defaults={'role': 'admin', 'is_staff': True, 'is_superuser': True, 'email': 'admin@example.com'},
        )
        if created:
            admin.set_password(options['admin_password'])
            admin.save()
            self.stdout.write(self.style.SUCCESS("Created admin user 'admin'"))
        else:
            self.stdout.write("Admin user already exists")

        if options['skip_site']:
            return

        if Site.objects.exists():
            self.stdout.write("Sites already exist, skipping demo data")
            return

        site = Site.objects.create(**DEMO_SITE)
        for material in DEMO_MATERIALS:
            Material.objects.create(
                site=site,
                name=material['name'],
                category=material['category'],
                unit=material['unit'],
                quantity=Decimal(material['quantity']),
                min_stock_level=Decimal(material['min_stock_level']),
            )
        for worker in DEMO_WORKERS:
            Worker.objects.create(
                site=site,
                name=worker['name'],
                role=worker['role'],
                daily_wage=Decimal(worker['daily_wage']),
                phone=worker['phone'],
                join_date=DEMO_SITE['start_date'],
            )
        today = timezone.localdate()
        for expense in DEMO_EXPENSES:
            Expense.objects.create(
                site=site,
                category=expense['category'],
                amount=Decimal(expense['amount']),
                date=today,
                description=expense['description'],
            )

        self.stdout.write(self.style.SUCCESS(
            f"Created site '{site.name}' with {len(DEMO_MATERIALS)} materials, "
            f"{len(DEMO_WORKERS)} workers and {len(DEMO_EXPENSES)} expenses"
        ))
