import unittest

from stockledger.core.exceptions import CorruptDataError, NotFoundError, VerificationError
from stockledger.services.audit_service import audit_transaction
from stockledger.services.product_service import create_product
from stockledger.services.transaction_service import record_transaction
from tests.fakes import make_ledger


class AuditTransactionTest(unittest.TestCase):
    def setUp(self):
        self.ledger, self.backend = make_ledger()
        create_product(self.ledger, {"sku": "SKU-1", "name": "Widget", "price": 1.0, "quantity": 3})

    def test_returns_recorded_transaction(self):
        recorded = record_transaction(
            self.ledger,
            {"sku": "SKU-1", "type": "IN", "quantity": 2, "reason": "restock"},
            performed_by="ops@example.com",
            history_limit=100,
        )["transaction"]

        first = audit_transaction(self.ledger, recorded["transaction_id"])
        second = audit_transaction(self.ledger, recorded["transaction_id"])

        self.assertEqual(first, {"transaction": recorded, "verified": True})
        self.assertEqual(first, second)

    def test_unknown_id(self):
        with self.assertRaises(NotFoundError) as ctx:
            audit_transaction(self.ledger, "non-existent-uuid")
        self.assertEqual(ctx.exception.message, "Transaction not found")

    def test_corrupt_record_is_not_reported_as_missing(self):
        self.backend.put("transaction:id:broken", "{oops")
        with self.assertRaises(CorruptDataError) as ctx:
            audit_transaction(self.ledger, "broken")
        self.assertEqual(ctx.exception.message, "Corrupt transaction data")

    def test_untrusted_record(self):
        self.backend.put("transaction:id:tampered", "{}")
        self.backend.tampered_keys.add(b"transaction:id:tampered")
        with self.assertRaises(VerificationError):
            audit_transaction(self.ledger, "tampered")


if __name__ == "__main__":
    unittest.main()
