import json
import unittest
import uuid

from stockledger.core.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ValidationFailure,
    VerificationError,
)
from stockledger.services.product_service import create_product, get_product
from stockledger.services.transaction_service import (
    normalize_quantity,
    record_transaction,
    transaction_history,
)
from tests.fakes import make_ledger

HISTORY_LIMIT = 1000


def _record(ledger, transaction_type, quantity, **kwargs):
    payload = {"sku": "SKU-1", "type": transaction_type, "quantity": quantity, "reason": None}
    return record_transaction(
        ledger,
        payload,
        performed_by=kwargs.pop("performed_by", "ops@example.com"),
        history_limit=HISTORY_LIMIT,
        **kwargs,
    )


class NormalizeQuantityTest(unittest.TestCase):
    def test_in_is_positive(self):
        self.assertEqual(normalize_quantity("IN", -5), 5)

    def test_out_is_negative(self):
        self.assertEqual(normalize_quantity("OUT", 5), -5)
        self.assertEqual(normalize_quantity("OUT", -5), -5)

    def test_adjustment_keeps_sign(self):
        self.assertEqual(normalize_quantity("ADJUSTMENT", -8), -8)

    def test_unknown_type(self):
        with self.assertRaises(ValidationFailure):
            normalize_quantity("MOVE", 1)


class RecordTransactionTest(unittest.TestCase):
    def setUp(self):
        self.ledger, self.backend = make_ledger()
        create_product(self.ledger, {"sku": "SKU-1", "name": "Widget", "price": 2.5, "quantity": 10})

    def _stock(self):
        return get_product(self.ledger, "SKU-1", HISTORY_LIMIT)["current_stock"]

    def test_stock_walkthrough(self):
        _record(self.ledger, "OUT", 4)
        self.assertEqual(self._stock(), 6)

        with self.assertRaises(InsufficientStockError):
            _record(self.ledger, "OUT", 10)
        self.assertEqual(self._stock(), 6)

        _record(self.ledger, "IN", 3)
        self.assertEqual(self._stock(), 9)

    def test_rejected_out_writes_nothing(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            _record(self.ledger, "OUT", 11)

        self.assertEqual(ctx.exception.details["current_stock"], 10)
        self.assertEqual(self.backend.values("transaction:SKU-1"), [])

    def test_out_to_exactly_zero_is_allowed(self):
        _record(self.ledger, "OUT", 10)
        self.assertEqual(self._stock(), 0)

    def test_adjustment_may_drive_stock_negative(self):
        _record(self.ledger, "ADJUSTMENT", -15)
        self.assertEqual(self._stock(), -5)

    def test_record_is_written_under_both_keys(self):
        result = _record(self.ledger, "OUT", 2, performed_by=None)
        transaction = result["transaction"]

        self.assertTrue(result["verified"])
        self.assertEqual(transaction["quantity_change"], -2)
        self.assertEqual(transaction["performed_by"], "unknown")
        self.assertEqual(uuid.UUID(transaction["transaction_id"]).version, 4)
        self.assertTrue(transaction["timestamp"].endswith("Z"))

        by_sku = self.backend.values("transaction:SKU-1")
        by_id = self.backend.values("transaction:id:" + transaction["transaction_id"])
        self.assertEqual(len(by_sku), 1)
        self.assertEqual(by_sku, by_id)
        self.assertEqual(json.loads(by_id[0]), transaction)

    def test_signs_are_normalized_before_storage(self):
        _record(self.ledger, "IN", -3)
        _record(self.ledger, "OUT", -2)

        stored = [json.loads(value)["quantity_change"] for value in self.backend.values("transaction:SKU-1")]
        self.assertEqual(stored, [3, -2])

    def test_unknown_product(self):
        with self.assertRaises(NotFoundError) as ctx:
            record_transaction(
                self.ledger,
                {"sku": "NOPE", "type": "IN", "quantity": 1},
                history_limit=HISTORY_LIMIT,
            )
        self.assertEqual(ctx.exception.message, "Product not found")
        self.assertEqual(self.backend.values("transaction:NOPE"), [])

    def test_history_failure_counts_as_no_history(self):
        _record(self.ledger, "OUT", 4)
        self.backend.unavailable_history = True

        with self.assertLogs("stockledger.services.transaction_service", level="WARNING"):
            result = _record(self.ledger, "OUT", 10)

        self.assertEqual(result["transaction"]["quantity_change"], -10)

    def test_verification_failure_aborts(self):
        self.backend.tampered_keys.add(b"transaction:SKU-1")
        with self.assertRaises(VerificationError):
            _record(self.ledger, "IN", 1)

    def test_mirrors_stock_onto_product_when_enabled(self):
        _record(self.ledger, "OUT", 4, sync_product_stock=True)

        product = json.loads(self.backend.values("product:SKU-1")[-1])
        self.assertEqual(product["quantity"], 6)
        self.assertEqual(product["initial_quantity"], 10)
        self.assertEqual(self._stock(), 6)

        _record(self.ledger, "IN", 1, sync_product_stock=True)
        self.assertEqual(self._stock(), 7)

    def test_mirror_failure_keeps_transaction(self):
        self.backend.failing_write_keys.add(b"product:SKU-1")

        with self.assertLogs("stockledger.services.transaction_service", level="WARNING"):
            result = _record(self.ledger, "IN", 5, sync_product_stock=True)

        self.assertEqual(len(self.backend.values("transaction:id:" + result["transaction"]["transaction_id"])), 1)
        self.assertEqual(self._stock(), 15)


class TransactionHistoryTest(unittest.TestCase):
    def setUp(self):
        self.ledger, self.backend = make_ledger()
        create_product(self.ledger, {"sku": "SKU-1", "name": "Widget", "price": 2.5, "quantity": 10})

    def test_unknown_sku_is_not_found(self):
        with self.assertRaises(NotFoundError):
            transaction_history(self.ledger, "SKU-1", 100)

    def test_running_balance_most_recent_first(self):
        _record(self.ledger, "IN", 5)
        _record(self.ledger, "OUT", 2)

        history = transaction_history(self.ledger, "SKU-1", 100)

        self.assertEqual([tx["quantity_change"] for tx in history["transactions"]], [-2, 5])
        self.assertEqual([tx["running_balance"] for tx in history["transactions"]], [-2, 3])
        self.assertEqual(history["running_balance"], 3)

    def test_size_limits_versions(self):
        for _ in range(3):
            _record(self.ledger, "IN", 1)
        history = transaction_history(self.ledger, "SKU-1", 2)
        self.assertEqual(len(history["transactions"]), 2)


if __name__ == "__main__":
    unittest.main()
