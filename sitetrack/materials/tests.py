"""
Tests for the stock ledger, stock classification and the materials API
"""
from decimal import Decimal
from io import StringIO
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from sitetrack.core.models import AuditLog
from sitetrack.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from sitetrack.materials.ledger import (
    InvalidTransaction, StockLedger, classify_stock, is_low_stock, stock_percentage,
)
from sitetrack.materials.models import Material, MaterialTransaction
from sitetrack.materials.stores import DjangoMaterialStore, InMemoryMaterialStore


class StockClassificationTests(SimpleTestCase):

    def test_quantity_at_minimum_is_sufficient(self):
        self.assertEqual(classify_stock(Decimal('50'), Decimal('50')), 'sufficient')

    def test_just_below_critical_ratio_is_critical(self):
        self.assertEqual(classify_stock(Decimal('19.5'), Decimal('50')), 'critical')  # 39%

    def test_exactly_at_critical_ratio_is_low(self):
        self.assertEqual(classify_stock(Decimal('20'), Decimal('50')), 'low')  # 40%

    def test_ninety_percent_is_low(self):
        self.assertEqual(classify_stock(Decimal('45'), Decimal('50')), 'low')

    def test_seed_cement_is_critical(self):
        self.assertEqual(classify_stock(15, 50), 'critical')
        self.assertEqual(stock_percentage(15, 50), 30)

    def test_zero_minimum(self):
        self.assertEqual(classify_stock(0, 0), 'sufficient')
        self.assertEqual(stock_percentage(0, 0), 100)

    def test_percentage_capped_and_rounded(self):
        self.assertEqual(stock_percentage(850, 500), 100)
        self.assertEqual(stock_percentage(120, 200), 60)
        self.assertEqual(stock_percentage(Decimal('1'), Decimal('8')), 13)  # 12.5 rounds half up

    def test_is_low_stock(self):
        self.assertTrue(is_low_stock(49, 50))
        self.assertFalse(is_low_stock(50, 50))


class StockLedgerTests(SimpleTestCase):
    """Ledger behaviour against the in-memory store"""

    def setUp(self):
        self.store = InMemoryMaterialStore()
        self.ledger = StockLedger(self.store)
        self.cement = self.store.add_material('Cement (OPC)', quantity='15', min_stock_level='50', unit='Bags')

    def test_added_increases_quantity(self):
        result = self.ledger.record_transaction(self.cement.id, 1, 'added', Decimal('10'))
        self.assertEqual(self.cement.quantity, Decimal('25'))
        self.assertEqual(result.previous_quantity, Decimal('15'))
        self.assertEqual(result.new_quantity, Decimal('25'))
        self.assertFalse(result.clamped)

    def test_used_decreases_quantity(self):
        self.ledger.record_transaction(self.cement.id, 1, 'used', Decimal('5'))
        self.assertEqual(self.cement.quantity, Decimal('10'))

    def test_over_consumption_clamps_at_zero(self):
        with self.assertLogs('sitetrack.materials', level='WARNING'):
            result = self.ledger.record_transaction(self.cement.id, 1, 'used', Decimal('20'))
        self.assertEqual(self.cement.quantity, Decimal('0'))
        self.assertTrue(result.clamped)
        self.assertEqual(result.transaction.quantity, Decimal('20'))
        self.assertEqual(result.absorbed_quantity, Decimal('5'))

    def test_using_exact_stock_is_not_a_clamp(self):
        result = self.ledger.record_transaction(self.cement.id, 1, 'used', Decimal('15'))
        self.assertEqual(self.cement.quantity, Decimal('0'))
        self.assertFalse(result.clamped)

    def test_add_then_use_restores_quantity(self):
        for q in ('0.001', '1.5', '7.333', '15'):
            self.ledger.record_transaction(self.cement.id, 1, 'added', Decimal(q))
            self.ledger.record_transaction(self.cement.id, 1, 'used', Decimal(q))
            self.assertEqual(self.cement.quantity, Decimal('15'))

    def test_quantity_never_negative(self):
        sequence = [('used', '10'), ('used', '10'), ('added', '3'), ('used', '100'), ('added', '0.5')]
        for transaction_type, quantity in sequence:
            self.ledger.record_transaction(self.cement.id, 1, transaction_type, Decimal(quantity))
            self.assertGreaterEqual(self.cement.quantity, 0)
        self.assertEqual(self.cement.quantity, Decimal('0.5'))
        self.assertEqual(len(self.store.transactions), len(sequence))

    def test_missing_material_still_records_transaction(self):
        with self.assertLogs('sitetrack.materials', level='WARNING'):
            result = self.ledger.record_transaction(999, 1, 'used', Decimal('3'))
        self.assertFalse(result.material_found)
        self.assertIsNone(result.new_quantity)
        self.assertEqual(len(self.store.transactions), 1)
        self.assertEqual(self.cement.quantity, Decimal('15'))

    def test_rejects_non_positive_quantity(self):
        with self.assertRaises(InvalidTransaction):
            self.ledger.record_transaction(self.cement.id, 1, 'added', Decimal('0'))
        with self.assertRaises(InvalidTransaction):
            self.ledger.record_transaction(self.cement.id, 1, 'used', Decimal('-1'))
        self.assertEqual(self.store.transactions, [])

    def test_rejects_quantity_beyond_column_limit(self):
        big = self.store.add_material('Aggregate', quantity='999999999')
        with self.assertRaises(InvalidTransaction):
            self.ledger.record_transaction(big.id, 1, 'added', Decimal('999999999'))
        self.assertEqual(big.quantity, Decimal('999999999'))
        self.assertEqual(self.store.transactions, [])

    def test_rejects_unknown_type(self):
        with self.assertRaises(InvalidTransaction):
            self.ledger.record_transaction(self.cement.id, 1, 'returned', Decimal('1'))


class DjangoStoreLedgerTests(TestCase):
    """Ledger behaviour against the database"""

    def setUp(self):
        self.site = TestDataFactory.create_site()
        self.material = TestDataFactory.create_material(site=self.site, quantity='15', min_stock_level='50')
        self.ledger = StockLedger(DjangoMaterialStore())

    def test_clamp_in_database(self):
        result = self.ledger.record_transaction(self.material.id, self.site.id, 'used', Decimal('20'))
        self.material.refresh_from_db()
        self.assertEqual(self.material.quantity, Decimal('0'))
        self.assertTrue(result.clamped)
        self.assertEqual(MaterialTransaction.objects.get().quantity, Decimal('20'))

    def test_fractional_round_trip_in_database(self):
        before = self.material.last_updated
        self.ledger.record_transaction(self.material.id, self.site.id, 'added', Decimal('2.375'))
        self.ledger.record_transaction(self.material.id, self.site.id, 'used', Decimal('2.375'))
        self.material.refresh_from_db()
        self.assertEqual(self.material.quantity, Decimal('15'))
        self.assertGreaterEqual(self.material.last_updated, before)

    def test_fractional_steps_stay_exact_for_stock_queries(self):
        url = f'/api/v1/sites/{self.site.id}/materials/'
        tiles = TestDataFactory.create_material(site=self.site, name='Tiles', quantity='0.3', min_stock_level='0.3')
        self.ledger.record_transaction(tiles.id, self.site.id, 'added', Decimal('0.4'))
        self.ledger.record_transaction(tiles.id, self.site.id, 'used', Decimal('0.4'))
        tiles.refresh_from_db()
        self.assertEqual(tiles.quantity, Decimal('0.3'))

        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user())
        low = client.get(f'{url}low-stock/').data
        self.assertNotIn('Tiles', [m['name'] for m in low])
        sufficient = client.get(url, {'stock': 'sufficient'}).data
        self.assertIn('Tiles', [m['name'] for m in sufficient])


class MaterialAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.site = TestDataFactory.create_site()

    def test_create_material_for_site(self):
        data = {'name': 'Bricks', 'category': 'Masonry', 'unit': 'Pcs', 'quantity': '5000', 'min_stock_level': '1000'}
        response = self.client.post(f'/api/v1/sites/{self.site.id}/materials/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['site_id'], self.site.id)
        self.assertEqual(response.data['stock_status'], 'sufficient')
        self.assertEqual(response.data['stock_percentage'], 100)

    def test_create_material_with_site_in_body(self):
        data = {'site_id': self.site.id, 'name': 'Gravel', 'category': 'Aggregate', 'unit': 'CFT',
                'quantity': '10', 'min_stock_level': '50'}
        response = self.client.post('/api/v1/materials/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['stock_status'], 'critical')

    def test_negative_quantity_rejected(self):
        data = {'site_id': self.site.id, 'name': 'Bad', 'category': 'X', 'unit': 'Kg', 'quantity': '-1'}
        response = self.client.post('/api/v1/materials/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quantity', response.data)

    def test_unknown_site_rejected(self):
        data = {'site_id': 99999, 'name': 'Orphan', 'category': 'X', 'unit': 'Kg', 'quantity': '1'}
        response = self.client.post('/api/v1/materials/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('site_id', response.data)

    def test_list_filters(self):
        TestDataFactory.create_material(site=self.site, name='Cement (OPC)', category='Cement', quantity='15', min_stock_level='50')
        TestDataFactory.create_material(site=self.site, name='Sand (Coarse)', category='Sand', quantity='120', min_stock_level='200')
        TestDataFactory.create_material(site=self.site, name='Steel Rods (10mm)', category='Steel', quantity='850', min_stock_level='500')
        TestDataFactory.create_material(name='Other site cement', category='Cement')

        url = f'/api/v1/sites/{self.site.id}/materials/'
        self.assertEqual(len(self.client.get(url).data), 3)
        self.assertEqual([m['name'] for m in self.client.get(url, {'stock': 'critical'}).data], ['Cement (OPC)'])
        self.assertEqual([m['name'] for m in self.client.get(url, {'stock': 'low'}).data], ['Sand (Coarse)'])
        self.assertEqual([m['name'] for m in self.client.get(url, {'stock': 'sufficient'}).data], ['Steel Rods (10mm)'])
        self.assertEqual([m['name'] for m in self.client.get(url, {'search': 'sand'}).data], ['Sand (Coarse)'])
        self.assertEqual([m['name'] for m in self.client.get(url, {'category': 'steel'}).data], ['Steel Rods (10mm)'])
        ordered = self.client.get(url, {'ordering': '-quantity'}).data
        self.assertEqual(ordered[0]['name'], 'Steel Rods (10mm)')

    def test_invalid_stock_filter_rejected(self):
        response = self.client.get(f'/api/v1/sites/{self.site.id}/materials/', {'stock': 'plenty'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_low_stock_list(self):
        TestDataFactory.create_material(site=self.site, name='Below', quantity='49', min_stock_level='50')
        TestDataFactory.create_material(site=self.site, name='At', quantity='50', min_stock_level='50')
        TestDataFactory.create_material(site=self.site, name='Empty', quantity='0', min_stock_level='10')
        response = self.client.get(f'/api/v1/sites/{self.site.id}/materials/low-stock/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m['name'] for m in response.data], ['Below', 'Empty'])

    def test_low_stock_for_missing_site(self):
        response = self.client.get('/api/v1/sites/99999/materials/low-stock/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_material(self):
        material = TestDataFactory.create_material(site=self.site, min_stock_level='10')
        response = self.client.put(f'/api/v1/materials/{material.id}/', {'min_stock_level': '500'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['min_stock_level']), Decimal('500'))
        self.assertTrue(AuditLog.objects.filter(action='update', model_name='Material').exists())

    def test_delete_material_keeps_transactions(self):
        material = TestDataFactory.create_material(site=self.site)
        txn = TestDataFactory.create_transaction(material, 'used', '4')

        response = self.client.delete(f'/api/v1/materials/{material.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Material.objects.filter(pk=material.pk).exists())

        kept = MaterialTransaction.objects.get(pk=txn.pk)
        self.assertEqual(kept.material_id, material.id)
        self.assertEqual(kept.quantity, Decimal('4'))

        response = self.client.get(f'/api/v1/materials/{material.id}/transactions/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertIsNone(response.data[0]['material_name'])

    def test_delete_missing_material_returns_404(self):
        response = self.client.delete('/api/v1/materials/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class MaterialTransactionAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user(username='site_engineer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.site = TestDataFactory.create_site()
        self.cement = TestDataFactory.create_material(site=self.site, name='Cement (OPC)', quantity='15', min_stock_level='50')

    def post_transaction(self, transaction_type, quantity, material_id=None, url='/api/v1/material-transactions/', **extra):
        data = {
            'material_id': material_id or self.cement.id,
            'site_id': self.site.id,
            'transaction_type': transaction_type,
            'quantity': quantity,
            'notes': 'Slab casting',
            'recorded_by': 'Rahim',
        }
        data.update(extra)
        return self.client.post(url, data, format='json')

    def test_added_transaction(self):
        response = self.post_transaction('added', '35')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['material_name'], 'Cement (OPC)')
        self.cement.refresh_from_db()
        self.assertEqual(self.cement.quantity, Decimal('50'))
        self.assertTrue(AuditLog.objects.filter(action='stock_transaction').exists())

    def test_used_more_than_stock_is_clamped(self):
        response = self.post_transaction('used', '20')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['quantity']), Decimal('20'))
        self.cement.refresh_from_db()
        self.assertEqual(self.cement.quantity, Decimal('0'))

        clamp = AuditLog.objects.get(action='stock_clamped')
        self.assertEqual(clamp.object_id, str(self.cement.id))
        self.assertEqual(clamp.changes['absorbed'], '5.000')

    def test_round_trip_restores_quantity(self):
        self.post_transaction('added', '12.5')
        self.post_transaction('used', '12.5')
        self.cement.refresh_from_db()
        self.assertEqual(self.cement.quantity, Decimal('15'))

    def test_transactions_alias_route(self):
        response = self.post_transaction('used', '5', url='/api/v1/transactions/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.cement.refresh_from_db()
        self.assertEqual(self.cement.quantity, Decimal('10'))

    def test_missing_material_is_recorded_without_stock_change(self):
        response = self.post_transaction('used', '3', material_id=99999)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['material_name'])
        self.assertTrue(MaterialTransaction.objects.filter(material_id=99999).exists())
        self.cement.refresh_from_db()
        self.assertEqual(self.cement.quantity, Decimal('15'))

    def test_invalid_transactions_rejected(self):
        for transaction_type, quantity in (('used', '0'), ('used', '-2'), ('borrowed', '1')):
            response = self.post_transaction(transaction_type, quantity)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(MaterialTransaction.objects.count(), 0)

    def test_quantity_overflow_rejected(self):
        self.cement.quantity = Decimal('999999999')
        self.cement.save()
        response = self.post_transaction('added', '999999999')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quantity', response.data)
        self.cement.refresh_from_db()
        self.assertEqual(self.cement.quantity, Decimal('999999999'))
        self.assertEqual(MaterialTransaction.objects.count(), 0)

    def test_material_from_another_site_rejected(self):
        other_site = TestDataFactory.create_site(name='Other Site')
        response = self.post_transaction('used', '5', site_id=other_site.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('site_id', response.data)
        self.cement.refresh_from_db()
        self.assertEqual(self.cement.quantity, Decimal('15'))
        self.assertEqual(MaterialTransaction.objects.count(), 0)

    def test_recorded_by_defaults_to_user(self):
        response = self.post_transaction('added', '1', recorded_by='')
        self.assertEqual(response.data['recorded_by'], 'site_engineer')

    def test_site_transactions_newest_first_with_filters(self):
        self.post_transaction('added', '10', date='2024-01-01T09:00:00Z')
        self.post_transaction('used', '4', date='2024-02-01T09:00:00Z')
        self.post_transaction('used', '1', date='2024-03-01T09:00:00Z')

        url = f'/api/v1/sites/{self.site.id}/material-transactions/'
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([Decimal(t['quantity']) for t in response.data], [Decimal('1'), Decimal('4'), Decimal('10')])

        used = self.client.get(url, {'type': 'used'}).data
        self.assertEqual(len(used), 2)
        ranged = self.client.get(url, {'date_from': '2024-01-15', 'date_to': '2024-02-15'}).data
        self.assertEqual([Decimal(t['quantity']) for t in ranged], [Decimal('4')])

    def test_site_transactions_bad_date(self):
        response = self.client.get(f'/api/v1/sites/{self.site.id}/material-transactions/', {'date_from': 'yesterday'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_material_transactions(self):
        other = TestDataFactory.create_material(site=self.site)
        self.post_transaction('added', '2')
        self.post_transaction('added', '3', material_id=other.id)
        response = self.client.get(f'/api/v1/materials/{self.cement.id}/transactions/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['material_id'], self.cement.id)

    def test_transactions_for_unknown_material_404(self):
        response = self.client.get('/api/v1/materials/99999/transactions/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class CheckStockSyncCommandTests(TestCase):

    def test_reports_materials_and_orphans(self):
        site = TestDataFactory.create_site()
        cement = TestDataFactory.create_material(site=site, name='Cement (OPC)', quantity='15', min_stock_level='50')
        gone = TestDataFactory.create_material(site=site, name='Old Tiles')
        TestDataFactory.create_transaction(cement, 'added', '5')
        TestDataFactory.create_transaction(gone, 'used', '2')
        gone_id = gone.id
        gone.delete()

        out = StringIO()
        call_command('check_stock_sync', stdout=out)
        output = out.getvalue()

        self.assertIn('Cement (OPC)', output)
        self.assertIn('critical', output)
        self.assertIn(f'material {gone_id}', output)
        self.assertEqual(MaterialTransaction.objects.count(), 2)
