"""
Tests for the site dashboard and the materials, labor and expenses reports
"""
from datetime import date, datetime
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from sitetrack.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from sitetrack.materials.ledger import StockLedger
from sitetrack.materials.stores import DjangoMaterialStore


class DashboardTests(TestCase):

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.site = TestDataFactory.create_site()

    def test_dashboard_counts(self):
        TestDataFactory.create_material(site=self.site, quantity='15', min_stock_level='50')
        TestDataFactory.create_material(site=self.site, quantity='120', min_stock_level='200')
        TestDataFactory.create_material(site=self.site, quantity='850', min_stock_level='500')
        TestDataFactory.create_worker(site=self.site, role='Mason')
        TestDataFactory.create_worker(site=self.site, role='Helper')
        TestDataFactory.create_expense(site=self.site, amount='25750')
        TestDataFactory.create_expense(site=self.site, amount='12000')
        TestDataFactory.create_expense(site=self.site, amount='999', date=date(2020, 1, 1))

        response = self.client.get(f'/api/v1/sites/{self.site.id}/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data
        self.assertEqual(data['materials_count'], 3)
        self.assertEqual(data['low_stock_count'], 2)
        self.assertEqual(data['critical_stock_count'], 1)
        self.assertEqual(data['workers_count'], 2)
        self.assertEqual(data['skilled_workers'], 1)
        self.assertEqual(data['helper_workers'], 1)
        self.assertEqual(data['today_expense_total'], Decimal('37750'))

    def test_recent_transactions_limited_to_five(self):
        material = TestDataFactory.create_material(site=self.site)
        for _ in range(7):
            TestDataFactory.create_transaction(material)
        response = self.client.get(f'/api/v1/sites/{self.site.id}/dashboard/')
        self.assertEqual(len(response.data['recent_transactions']), 5)

    def test_dashboard_cache_invalidated_on_change(self):
        material = TestDataFactory.create_material(site=self.site, quantity='100', min_stock_level='10')
        first = self.client.get(f'/api/v1/sites/{self.site.id}/dashboard/')
        self.assertEqual(first.data['low_stock_count'], 0)

        with self.captureOnCommitCallbacks(execute=True):
            StockLedger(DjangoMaterialStore()).record_transaction(material.id, self.site.id, 'used', Decimal('95'))

        second = self.client.get(f'/api/v1/sites/{self.site.id}/dashboard/')
        self.assertEqual(second.data['low_stock_count'], 1)
        self.assertEqual(len(second.data['recent_transactions']), 1)

    def test_dashboard_cache_kept_until_commit(self):
        material = TestDataFactory.create_material(site=self.site, quantity='100', min_stock_level='10')
        url = f'/api/v1/sites/{self.site.id}/dashboard/'
        self.assertEqual(self.client.get(url).data['low_stock_count'], 0)

        with self.captureOnCommitCallbacks() as callbacks:
            StockLedger(DjangoMaterialStore()).record_transaction(material.id, self.site.id, 'used', Decimal('95'))
        self.assertTrue(callbacks)
        self.assertEqual(self.client.get(url).data['low_stock_count'], 0)

        for callback in callbacks:
            callback()
        self.assertEqual(self.client.get(url).data['low_stock_count'], 1)

    def test_dashboard_missing_site(self):
        response = self.client.get('/api/v1/sites/99999/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ReportTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.site = TestDataFactory.create_site()

    def test_materials_report_sums_transactions_in_range(self):
        cement = TestDataFactory.create_material(site=self.site, name='Cement (OPC)', quantity='15', min_stock_level='50')
        in_range = timezone.make_aware(datetime(2024, 1, 10, 12, 0))
        out_of_range = timezone.make_aware(datetime(2023, 12, 1, 12, 0))
        TestDataFactory.create_transaction(cement, 'added', '40', date=in_range)
        TestDataFactory.create_transaction(cement, 'used', '25', date=in_range)
        TestDataFactory.create_transaction(cement, 'used', '5', date=out_of_range)

        url = f'/api/v1/sites/{self.site.id}/reports/materials/'
        response = self.client.get(url, {'date_from': '2024-01-01', 'date_to': '2024-01-31'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        row = response.data['materials'][0]
        self.assertEqual(row['added'], Decimal('40'))
        self.assertEqual(row['used'], Decimal('25'))
        self.assertEqual(row['current_stock'], Decimal('15'))
        self.assertEqual(row['stock_status'], 'critical')

        everything = self.client.get(url).data['materials'][0]
        self.assertEqual(everything['used'], Decimal('30'))

    def test_materials_report_without_transactions(self):
        TestDataFactory.create_material(site=self.site)
        row = self.client.get(f'/api/v1/sites/{self.site.id}/reports/materials/').data['materials'][0]
        self.assertEqual(row['added'], Decimal('0'))
        self.assertEqual(row['used'], Decimal('0'))

    def test_labor_report(self):
        mason = TestDataFactory.create_worker(site=self.site, role='Mason', daily_wage='800')
        helper = TestDataFactory.create_worker(site=self.site, role='Helper', daily_wage='500')
        TestDataFactory.create_attendance(mason, date=date(2024, 1, 10), hours_worked='8')
        TestDataFactory.create_attendance(helper, date=date(2024, 1, 10), present=False, hours_worked=None)
        TestDataFactory.create_expense(site=self.site, category='Labor', amount='12000', date=date(2024, 1, 10))
        TestDataFactory.create_expense(site=self.site, category='Materials', amount='5000', date=date(2024, 1, 10))

        response = self.client.get(f'/api/v1/sites/{self.site.id}/reports/labor/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data
        self.assertEqual(data['total_labor_cost'], Decimal('12000'))
        self.assertEqual(data['workers_count'], 2)
        self.assertEqual(data['average_daily_wage'], Decimal('650.00'))
        self.assertEqual(data['by_role']['Mason']['count'], 1)
        self.assertEqual(data['by_role']['Helper']['total_wage'], Decimal('500'))
        self.assertEqual(data['attendance']['present_days'], 1)
        self.assertEqual(data['attendance']['absent_days'], 1)
        self.assertEqual(data['attendance']['hours_worked'], Decimal('8'))

    def test_labor_report_empty_site(self):
        data = self.client.get(f'/api/v1/sites/{self.site.id}/reports/labor/').data
        self.assertEqual(data['workers_count'], 0)
        self.assertEqual(data['average_daily_wage'], Decimal('0'))
        self.assertEqual(data['total_labor_cost'], Decimal('0'))

    def test_expenses_report(self):
        TestDataFactory.create_expense(site=self.site, category='Materials', amount='200', date=date(2024, 1, 2))
        TestDataFactory.create_expense(site=self.site, category='Labor', amount='100', date=date(2024, 1, 1))
        TestDataFactory.create_expense(site=self.site, category='Materials', amount='50', date=date(2023, 1, 1))

        response = self.client.get(f'/api/v1/sites/{self.site.id}/reports/expenses/',
                                   {'date_from': '2024-01-01', 'date_to': '2024-01-31'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data
        self.assertEqual(data['total_expenses'], Decimal('300'))
        self.assertEqual(data['by_category'][0]['category'], 'Materials')
        self.assertEqual(data['by_category'][0]['percentage'], 66.7)
        self.assertEqual(data['by_category'][1]['percentage'], 33.3)
        self.assertEqual([d['date'] for d in data['by_date']], ['2024-01-01', '2024-01-02'])

    def test_expenses_report_empty(self):
        data = self.client.get(f'/api/v1/sites/{self.site.id}/reports/expenses/').data
        self.assertEqual(data['total_expenses'], Decimal('0'))
        self.assertEqual(data['by_category'], [])

    def test_reports_reject_bad_dates(self):
        for report in ('materials', 'labor', 'expenses'):
            response = self.client.get(f'/api/v1/sites/{self.site.id}/reports/{report}/', {'date_from': '01/01/2024'})
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, report)
            self.assertIn('date_from', response.data)
