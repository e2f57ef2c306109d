"""
Tests for authentication, audit logs, error handling and the seed command
"""
from io import StringIO
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase
from rest_framework import status
from rest_framework.exceptions import ValidationError
from sitetrack.core.exceptions import api_exception_handler
from sitetrack.core.models import AuditLog, User
from sitetrack.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from sitetrack.core.utils import create_audit_log, parse_date_param
from sitetrack.expenses.models import Expense
from sitetrack.labor.models import Worker
from sitetrack.materials.models import Material
from sitetrack.sites.models import Site


class AuthenticationTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user(username='foreman', password='secret123')
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens_and_user(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'foreman', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'foreman')
        self.assertEqual(response.data['user']['role'], 'user')

    def test_login_with_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'foreman', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token(self):
        login = self.client.post('/api/v1/auth/login/', {'username': 'foreman', 'password': 'secret123'}, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_returns_current_user(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'foreman')
        self.assertFalse(response.data['is_admin'])

    def test_no_user_management_endpoints(self):
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.assertEqual(self.client.get('/api/v1/users/').status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.post('/api/v1/users/', {'username': 'storekeeper', 'password': 'keeper123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(User.objects.filter(username='storekeeper').exists())


class AuditLogTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_site_creation_is_audited(self):
        data = {'name': 'Audit Tower', 'location': 'Banani', 'start_date': '2024-01-01'}
        response = self.client.post('/api/v1/sites/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        log = AuditLog.objects.get(action='create', model_name='Site')
        self.assertEqual(log.user, self.admin)
        self.assertEqual(log.object_name, 'Audit Tower')
        self.assertEqual(log.site_id, response.data['id'])

    def test_audit_log_list_filters(self):
        create_audit_log(action='create', model_name='Site', object_id=1, user=self.admin, site_id=1)
        create_audit_log(action='delete', model_name='Expense', object_id=2, user=self.admin, site_id=2)

        response = self.client.get('/api/v1/audit-logs/?action=delete')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['model_name'], 'Expense')

        response = self.client.get('/api/v1/audit-logs/?site=1')
        self.assertEqual([log['site_id'] for log in response.data], [1])

    def test_audit_log_bad_site_param(self):
        response = self.client.get('/api/v1/audit-logs/?site=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_audit_logs_admin_only(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_fields_skip_audit_log(self):
        self.assertIsNone(create_audit_log(action='create', model_name=None, object_id=1))
        self.assertEqual(AuditLog.objects.count(), 0)


class ErrorHandlingTests(SimpleTestCase):

    def test_unhandled_exception_becomes_500(self):
        with self.assertLogs('sitetrack.api', level='ERROR'):
            response = api_exception_handler(RuntimeError('database is locked'), {})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'detail': 'Internal server error'})

    def test_validation_error_keeps_drf_response(self):
        response = api_exception_handler(ValidationError({'name': ['This field is required.']}), {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'name': ['This field is required.']})

    def test_parse_date_param(self):
        self.assertIsNone(parse_date_param('', 'date'))
        self.assertEqual(parse_date_param('2024-02-29', 'date').isoformat(), '2024-02-29')
        with self.assertRaises(ValidationError):
            parse_date_param('29/02/2024', 'date')


class SeedDemoCommandTests(TestCase):

    def test_seed_creates_admin_and_demo_site(self):
        call_command('seed_demo', stdout=StringIO())

        admin = User.objects.get(username='admin')
        self.assertTrue(admin.check_password('admin123'))
        self.assertEqual(admin.role, 'admin')

        site = Site.objects.get(name='Dhaka Residence')
        self.assertEqual(Material.objects.filter(site=site).count(), 3)
        self.assertEqual(Worker.objects.filter(site=site).count(), 2)
        self.assertEqual(Expense.objects.filter(site=site).count(), 2)
        cement = Material.objects.get(name='Cement (OPC)')
        self.assertEqual(cement.quantity, 15)
        self.assertEqual(cement.min_stock_level, 50)

    def test_seed_is_idempotent(self):
        call_command('seed_demo', stdout=StringIO())
        call_command('seed_demo', stdout=StringIO())
        self.assertEqual(User.objects.filter(username='admin').count(), 1)
        self.assertEqual(Site.objects.count(), 1)
        self.assertEqual(Material.objects.count(), 3)
