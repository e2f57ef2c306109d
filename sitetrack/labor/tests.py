"""
Tests for workers and attendance
"""
from datetime import date, timedelta
from decimal import Decimal
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from sitetrack.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from sitetrack.labor.models import Attendance, Worker


class WorkerTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.site = TestDataFactory.create_site()

    def test_create_worker(self):
        data = {'site_id': self.site.id, 'name': 'Abdul Karim', 'role': 'Mason', 'daily_wage': '800'}
        response = self.client.post('/api/v1/workers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['join_date'], timezone.localdate().isoformat())

    def test_negative_wage_rejected(self):
        data = {'site_id': self.site.id, 'name': 'X', 'role': 'Helper', 'daily_wage': '-5'}
        response = self.client.post('/api/v1/workers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('daily_wage', response.data)

    def test_site_workers_filters_and_ordering(self):
        TestDataFactory.create_worker(site=self.site, name='Abdul Karim', role='Mason', daily_wage='800')
        TestDataFactory.create_worker(site=self.site, name='Mohammad Ali', role='Helper', daily_wage='500')
        TestDataFactory.create_worker(name='Elsewhere', role='Mason')

        url = f'/api/v1/sites/{self.site.id}/workers/'
        self.assertEqual([w['name'] for w in self.client.get(url).data], ['Abdul Karim', 'Mohammad Ali'])
        self.assertEqual([w['name'] for w in self.client.get(url, {'role': 'helper'}).data], ['Mohammad Ali'])
        self.assertEqual([w['name'] for w in self.client.get(url, {'search': 'karim'}).data], ['Abdul Karim'])
        by_wage = self.client.get(url, {'ordering': 'daily_wage'}).data
        self.assertEqual(by_wage[0]['name'], 'Mohammad Ali')

    def test_update_worker(self):
        worker = TestDataFactory.create_worker(site=self.site, daily_wage='500')
        response = self.client.patch(f'/api/v1/workers/{worker.id}/', {'daily_wage': '650'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        worker.refresh_from_db()
        self.assertEqual(worker.daily_wage, Decimal('650'))

    def test_delete_worker_removes_attendance(self):
        worker = TestDataFactory.create_worker(site=self.site)
        TestDataFactory.create_attendance(worker)
        response = self.client.delete(f'/api/v1/workers/{worker.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Worker.objects.filter(pk=worker.pk).exists())
        self.assertEqual(Attendance.objects.count(), 0)


class AttendanceTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.site = TestDataFactory.create_site()
        self.worker = TestDataFactory.create_worker(site=self.site, name='Abdul Karim')

    def test_record_attendance_defaults_site_from_worker(self):
        data = {'worker_id': self.worker.id, 'date': '2024-04-10', 'present': True, 'hours_worked': '8'}
        response = self.client.post('/api/v1/attendance/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['site_id'], self.site.id)
        self.assertEqual(response.data['worker_name'], 'Abdul Karim')

    def test_attendance_site_must_match_worker(self):
        other_site = TestDataFactory.create_site()
        data = {'worker_id': self.worker.id, 'site_id': other_site.id, 'date': '2024-04-10'}
        response = self.client.post('/api/v1/attendance/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('site_id', response.data)

    def test_site_attendance_defaults_to_today(self):
        today = timezone.localdate()
        TestDataFactory.create_attendance(self.worker, date=today)
        TestDataFactory.create_attendance(self.worker, date=today - timedelta(days=1), present=False)

        response = self.client.get(f'/api/v1/sites/{self.site.id}/attendance/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['date'], today.isoformat())

    def test_site_attendance_for_date(self):
        TestDataFactory.create_attendance(self.worker, date=date(2023, 6, 15))
        response = self.client.get(f'/api/v1/sites/{self.site.id}/attendance/', {'date': '2023-06-15'})
        self.assertEqual(len(response.data), 1)

    def test_site_attendance_invalid_date(self):
        response = self.client.get(f'/api/v1/sites/{self.site.id}/attendance/', {'date': '10-04-2024'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('date', response.data)

    def test_worker_attendance_newest_first(self):
        today = timezone.localdate()
        TestDataFactory.create_attendance(self.worker, date=today - timedelta(days=2))
        TestDataFactory.create_attendance(self.worker, date=today)
        response = self.client.get(f'/api/v1/workers/{self.worker.id}/attendance/')
        self.assertEqual([a['date'] for a in response.data],
                         [today.isoformat(), (today - timedelta(days=2)).isoformat()])

    def test_update_attendance(self):
        record = TestDataFactory.create_attendance(self.worker)
        response = self.client.put(f'/api/v1/attendance/{record.id}/', {'present': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        record.refresh_from_db()
        self.assertFalse(record.present)
