"""
Tests for expenses
"""
from datetime import date
from django.test import TestCase
from rest_framework import status
from sitetrack.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from sitetrack.expenses.models import Expense


class ExpenseTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.site = TestDataFactory.create_site()

    def test_create_expense(self):
        data = {'site_id': self.site.id, 'category': 'Materials', 'amount': '25750', 'description': 'Cement purchase'}
        response = self.client.post('/api/v1/expenses/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['has_receipt'])

    def test_negative_amount_rejected(self):
        data = {'site_id': self.site.id, 'category': 'Labor', 'amount': '-1'}
        response = self.client.post('/api/v1/expenses/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)

    def test_site_expenses_filters(self):
        TestDataFactory.create_expense(site=self.site, category='Materials', amount='300', date=date(2024, 1, 5), description='Sand delivery')
        TestDataFactory.create_expense(site=self.site, category='Labor', amount='1200', date=date(2024, 1, 20))
        TestDataFactory.create_expense(site=self.site, category='Equipment', amount='50', date=date(2024, 2, 2))

        url = f'/api/v1/sites/{self.site.id}/expenses/'
        newest_first = self.client.get(url).data
        self.assertEqual([e['category'] for e in newest_first], ['Equipment', 'Labor', 'Materials'])

        january = self.client.get(url, {'date_from': '2024-01-01', 'date_to': '2024-01-31'}).data
        self.assertEqual(len(january), 2)
        self.assertEqual([e['category'] for e in self.client.get(url, {'category': 'labor'}).data], ['Labor'])
        self.assertEqual([e['category'] for e in self.client.get(url, {'search': 'sand'}).data], ['Materials'])
        by_amount = self.client.get(url, {'ordering': '-amount'}).data
        self.assertEqual(by_amount[0]['category'], 'Labor')

    def test_invalid_date_filter(self):
        response = self.client.get(f'/api/v1/sites/{self.site.id}/expenses/', {'date_from': '2024-13-01'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete(self):
        expense = TestDataFactory.create_expense(site=self.site)
        response = self.client.put(f'/api/v1/expenses/{expense.id}/',
                                   {'has_receipt': True, 'receipt_url': 'https://receipts.example.com/1.pdf'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['has_receipt'])

        response = self.client.delete(f'/api/v1/expenses/{expense.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Expense.objects.filter(pk=expense.pk).exists())

        response = self.client.delete(f'/api/v1/expenses/{expense.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
