"""
Storage backends for the stock ledger

A MaterialStore persists transaction records and adjusts material quantities.
DjangoMaterialStore works on the ORM models; InMemoryMaterialStore keeps
everything in dictionaries and is what the ledger unit tests run against.
"""
from contextlib import contextmanager
from decimal import Decimal

from django.db import transaction as db_transaction
from django.utils import timezone

from .models import Material, MaterialTransaction

ZERO = Decimal('0')


class MaterialStore:
    """Interface used by StockLedger"""

    def atomic(self):
        """Context manager wrapping one ledger operation"""
        raise NotImplementedError

    def create_transaction(self, material_id, site_id, transaction_type, quantity,
                           notes='', recorded_by='', date=None):
        """Persist a transaction record and return it (must expose .id and .quantity)"""
        raise NotImplementedError

    def lock_material(self, material_id):
        """Return the material (exposing .name and .quantity) locked for update, or None"""
        raise NotImplementedError

    def set_quantity(self, material_id, quantity):
        """Store quantity on the locked material and return it"""
        raise NotImplementedError


class DjangoMaterialStore(MaterialStore):

    def atomic(self):
        return db_transaction.atomic()

    def create_transaction(self, material_id, site_id, transaction_type, quantity,
                           notes='', recorded_by='', date=None):
        return MaterialTransaction.objects.create(
            material_id=material_id,
            site_id=site_id,
            transaction_type=transaction_type,
            quantity=quantity,
            notes=notes or '',
            recorded_by=recorded_by or '',
            date=date or timezone.now(),
        )

    def lock_material(self, material_id):
        return Material.objects.select_for_update().filter(pk=material_id).first()

    def set_quantity(self, material_id, quantity):
        # quantity is computed by the ledger while the row is locked
        Material.objects.filter(pk=material_id).update(quantity=quantity, last_updated=timezone.now())
        return quantity


class MemoryRecord:
    """Attribute bag used for in-memory materials and transactions"""

    def __init__(self, **fields):
        self.__dict__.update(fields)

    def __repr__(self):
        return f"<MemoryRecord {self.__dict__}>"


class InMemoryMaterialStore(MaterialStore):

    def __init__(self):
        self.materials = {}
        self.transactions = []
        self._next_material_id = 1
        self._next_transaction_id = 1

    @contextmanager
    def atomic(self):
        yield

    def add_material(self, name, quantity, min_stock_level=ZERO, site_id=1, unit='', category=''):
        material = MemoryRecord(
            id=self._next_material_id,
            site_id=site_id,
            name=name,
            category=category,
            unit=unit,
            quantity=Decimal(str(quantity)),
            min_stock_level=Decimal(str(min_stock_level)),
            last_updated=timezone.now(),
        )
        self.materials[material.id] = material
        self._next_material_id += 1
        return material

    def delete_material(self, material_id):
        self.materials.pop(material_id, None)

    def create_transaction(self, material_id, site_id, transaction_type, quantity,
                           notes='', recorded_by='', date=None):
        record = MemoryRecord(
            id=self._next_transaction_id,
            material_id=material_id,
            site_id=site_id,
            transaction_type=transaction_type,
            quantity=quantity,
            notes=notes or '',
            recorded_by=recorded_by or '',
            date=date or timezone.now(),
        )
        self.transactions.append(record)
        self._next_transaction_id += 1
        return record

    def lock_material(self, material_id):
        return self.materials.get(material_id)

    def set_quantity(self, material_id, quantity):
        material = self.materials[material_id]
        material.quantity = quantity
        material.last_updated = timezone.now()
        return material.quantity
