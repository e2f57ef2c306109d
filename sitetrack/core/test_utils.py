"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from sitetrack.sites.models import Site
from sitetrack.materials.models import Material, MaterialTransaction
from sitetrack.labor.models import Worker, Attendance
from sitetrack.expenses.models import Expense
from sitetrack.journal.models import Photo, Note
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='user', is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_admin(username=None, password='testpass123'):
        """Create a user with the admin role"""
        return TestDataFactory.create_user(username=username, password=password, role='admin')

    @staticmethod
    def create_site(name=None, location='Dhaka', status='ongoing', start_date=None):
        """Create a test site"""
        if not name:
            name = f'Site_{TestDataFactory.random_string(6)}'
        return Site.objects.create(
            name=name,
            location=location,
            start_date=start_date or timezone.localdate(),
            status=status
        )

    @staticmethod
    def create_material(site=None, name=None, quantity='100', min_stock_level='10',
                        category='Construction', unit='Bags'):
        """Create a test material"""
        if not site:
            site = TestDataFactory.create_site()
        if not name:
            name = f'Material_{TestDataFactory.random_string(6)}'
        return Material.objects.create(
            site=site,
            name=name,
            category=category,
            unit=unit,
            quantity=Decimal(str(quantity)),
            min_stock_level=Decimal(str(min_stock_level))
        )

    @staticmethod
    def create_transaction(material, transaction_type='added', quantity='1', date=None, notes=''):
        """
        Create a raw transaction record without touching the material's quantity.
        Use StockLedger when the stock should move.
        """
        return MaterialTransaction.objects.create(
            material=material,
            site_id=material.site_id,
            transaction_type=transaction_type,
            quantity=Decimal(str(quantity)),
            date=date or timezone.now(),
            notes=notes,
            recorded_by='tester'
        )

    @staticmethod
    def create_worker(site=None, name=None, role='Mason', daily_wage='800'):
        """Create a test worker"""
        if not site:
            site = TestDataFactory.create_site()
        if not name:
            name = f'Worker_{TestDataFactory.random_string(6)}'
        return Worker.objects.create(
            site=site,
            name=name,
            role=role,
            daily_wage=Decimal(str(daily_wage)),
            phone=f'01{random.randint(100000000, 999999999)}'
        )

    @staticmethod
    def create_attendance(worker, date=None, present=True, hours_worked='8'):
        """Create a test attendance record on the worker's site"""
        return Attendance.objects.create(
            worker=worker,
            site_id=worker.site_id,
            date=date or timezone.localdate(),
            present=present,
            hours_worked=Decimal(str(hours_worked)) if hours_worked is not None else None
        )

    @staticmethod
    def create_expense(site=None, category='Materials', amount='1000', date=None, description=None):
        """Create a test expense"""
        if not site:
            site = TestDataFactory.create_site()
        return Expense.objects.create(
            site=site,
            category=category,
            amount=Decimal(str(amount)),
            date=date or timezone.localdate(),
            description=description or f'Test expense {TestDataFactory.random_string(4)}'
        )

    @staticmethod
    def create_photo(site=None, title=None):
        """Create a test photo"""
        if not site:
            site = TestDataFactory.create_site()
        if not title:
            title = f'Photo_{TestDataFactory.random_string(6)}'
        return Photo.objects.create(
            site=site,
            title=title,
            image_url=f'https://images.example.com/{TestDataFactory.random_string(8)}.jpg'
        )

    @staticmethod
    def create_note(site=None, title=None, content='Test note content', category=None):
        """Create a test note"""
        if not site:
            site = TestDataFactory.create_site()
        if not title:
            title = f'Note_{TestDataFactory.random_string(6)}'
        return Note.objects.create(
            site=site,
            title=title,
            content=content,
            category=category
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
