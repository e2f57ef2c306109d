"""
Stock ledger: applies material transactions to the running quantity

Each transaction is stored as an append-only record and then applied to its
material as a signed delta. The resulting quantity never goes below zero;
consumption beyond what is in stock is absorbed (the record keeps the full
amount) and reported on the result as a clamp.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

logger = logging.getLogger('sitetrack.materials')

TRANSACTION_ADDED = 'added'
TRANSACTION_USED = 'used'
TRANSACTION_TYPES = (TRANSACTION_ADDED, TRANSACTION_USED)

STOCK_CRITICAL = 'critical'
STOCK_LOW = 'low'
STOCK_SUFFICIENT = 'sufficient'

# Below this fraction of the minimum level a material is critical rather than low
CRITICAL_RATIO = Decimal('0.4')

ZERO = Decimal('0')
QUANTITY_STEP = Decimal('0.001')
# Largest value a quantity column (12 digits, 3 decimal places) can hold
MAX_QUANTITY = Decimal('999999999.999')


class InvalidTransaction(ValueError):
    """Raised when a transaction request is malformed or would overflow the stored quantity"""


def _to_decimal(value):
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def classify_stock(quantity, min_stock_level):
    """Return 'critical', 'low' or 'sufficient' for a quantity against its minimum level"""
    quantity = _to_decimal(quantity)
    min_stock_level = _to_decimal(min_stock_level)

    if quantity >= min_stock_level:
        return STOCK_SUFFICIENT
    if quantity < min_stock_level * CRITICAL_RATIO:
        return STOCK_CRITICAL
    return STOCK_LOW


def stock_percentage(quantity, min_stock_level):
    """Quantity as a whole percentage of the minimum level, capped at 100"""
    quantity = _to_decimal(quantity)
    min_stock_level = _to_decimal(min_stock_level)

    if min_stock_level <= 0:
        return 100
    percentage = (quantity / min_stock_level * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    return min(100, int(percentage))


def is_low_stock(quantity, min_stock_level):
    return _to_decimal(quantity) < _to_decimal(min_stock_level)


class LedgerResult:
    """Outcome of recording one transaction"""

    def __init__(self, transaction, material_found, previous_quantity=None, new_quantity=None,
                 clamped=False, material_name=None):
        self.transaction = transaction
        self.material_found = material_found
        self.previous_quantity = previous_quantity
        self.new_quantity = new_quantity
        self.clamped = clamped
        self.material_name = material_name

    @property
    def absorbed_quantity(self):
        """Portion of a 'used' quantity that exceeded the available stock"""
        if not self.clamped:
            return Decimal('0')
        return _to_decimal(self.transaction.quantity) - self.previous_quantity

    def __repr__(self):
        return (f"<LedgerResult txn={getattr(self.transaction, 'id', None)} "
                f"found={self.material_found} {self.previous_quantity}->{self.new_quantity} "
                f"clamped={self.clamped}>")


class StockLedger:
    """
    Records material transactions against a MaterialStore.

    The store is supplied by the caller: DjangoMaterialStore for the database,
    InMemoryMaterialStore for tests and scripts.
    """

    def __init__(self, store):
        self.store = store

    def record_transaction(self, material_id, site_id, transaction_type, quantity,
                           notes='', recorded_by='', date=None):
        """
        Store the transaction and apply it to the material's quantity.

        The record is always written. If the material no longer exists the
        quantity update is skipped. Over-consumption is clamped at zero. A
        result above MAX_QUANTITY raises InvalidTransaction and nothing is written.
        """
        if transaction_type not in TRANSACTION_TYPES:
            raise InvalidTransaction(f"Unknown transaction type '{transaction_type}'")
        quantity = _to_decimal(quantity)
        if quantity <= 0:
            raise InvalidTransaction('Transaction quantity must be greater than zero')

        delta = quantity if transaction_type == TRANSACTION_ADDED else -quantity

        with self.store.atomic():
            material = self.store.lock_material(material_id)
            if material is not None:
                previous = _to_decimal(material.quantity)
                if previous + delta > MAX_QUANTITY:
                    raise InvalidTransaction(
                        f"Resulting quantity {previous + delta} exceeds the maximum of {MAX_QUANTITY}"
                    )

            transaction = self.store.create_transaction(
                material_id=material_id,
                site_id=site_id,
                transaction_type=transaction_type,
                quantity=quantity,
                notes=notes,
                recorded_by=recorded_by,
                date=date,
            )

            if material is None:
                logger.warning(
                    f"Transaction {transaction.id} recorded for missing material {material_id}; "
                    f"stock not adjusted"
                )
                return LedgerResult(transaction, material_found=False)

            new_quantity = self.store.set_quantity(
                material_id, max(previous + delta, ZERO).quantize(QUANTITY_STEP)
            )

        clamped = previous + delta < 0
        if clamped:
            logger.warning(
                f"Stock for material {material_id} ({material.name}) clamped at zero: "
                f"used {quantity} with only {previous} available"
            )
        else:
            logger.info(
                f"Material {material_id} ({material.name}) {transaction_type} {quantity}: "
                f"{previous} -> {new_quantity}"
            )

        return LedgerResult(
            transaction,
            material_found=True,
            previous_quantity=previous,
            new_quantity=new_quantity,
            clamped=clamped,
            material_name=material.name,
        )
