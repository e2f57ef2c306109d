"""
Tests for site CRUD and cascade on delete
"""
from django.test import TestCase
from rest_framework import status
from sitetrack.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from sitetrack.expenses.models import Expense
from sitetrack.journal.models import Note, Photo
from sitetrack.labor.models import Attendance, Worker
from sitetrack.materials.models import Material, MaterialTransaction
from sitetrack.sites.models import Site


class SiteTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_site(self):
        data = {
            'name': 'Chittagong Tower',
            'location': 'Agrabad, Chittagong',
            'start_date': '2024-03-01',
            'expected_end_date': '2025-03-01',
        }
        response = self.client.post('/api/v1/sites/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'ongoing')
        self.assertEqual(response.data['expected_end_date'], '2025-03-01')

    def test_create_site_requires_name(self):
        response = self.client.post('/api/v1/sites/', {'location': 'Nowhere', 'start_date': '2024-01-01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)

    def test_end_date_before_start_rejected(self):
        data = {'name': 'Backwards', 'location': 'X', 'start_date': '2024-05-01', 'expected_end_date': '2024-01-01'}
        response = self.client.post('/api/v1/sites/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('expected_end_date', response.data)

    def test_invalid_status_rejected(self):
        site = TestDataFactory.create_site()
        response = self.client.patch(f'/api/v1/sites/{site.id}/', {'status': 'abandoned'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_sites_filtered_by_status(self):
        TestDataFactory.create_site(name='A', status='ongoing')
        TestDataFactory.create_site(name='B', status='completed')
        response = self.client.get('/api/v1/sites/?status=completed')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['name'] for s in response.data], ['B'])

    def test_put_is_partial(self):
        site = TestDataFactory.create_site(name='Old Name')
        response = self.client.put(f'/api/v1/sites/{site.id}/', {'status': 'on_hold'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        site.refresh_from_db()
        self.assertEqual(site.status, 'on_hold')
        self.assertEqual(site.name, 'Old Name')

    def test_get_missing_site_returns_404(self):
        response = self.client.get('/api/v1/sites/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_missing_site_returns_404(self):
        response = self.client.delete('/api/v1/sites/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_site_cascades(self):
        site = TestDataFactory.create_site()
        material = TestDataFactory.create_material(site=site)
        TestDataFactory.create_transaction(material)
        worker = TestDataFactory.create_worker(site=site)
        TestDataFactory.create_attendance(worker)
        TestDataFactory.create_expense(site=site)
        TestDataFactory.create_photo(site=site)
        TestDataFactory.create_note(site=site)

        response = self.client.delete(f'/api/v1/sites/{site.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Site.objects.filter(pk=site.pk).exists())
        for model in (Material, MaterialTransaction, Worker, Attendance, Expense, Photo, Note):
            self.assertEqual(model.objects.count(), 0, model.__name__)

    def test_requires_authentication(self):
        client = AuthenticatedAPIClient()
        response = client.get('/api/v1/sites/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
