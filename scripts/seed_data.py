import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from stockledger.config import get_settings
from stockledger.core.exceptions import LedgerError, ProductExistsError
from stockledger.core.logging import setup_logging
from stockledger.ledger.immudb_backend import connect_ledger
from stockledger.services.product_service import create_product
from stockledger.services.transaction_service import record_transaction

SAMPLE_PRODUCTS = [
    {
        "sku": "DRS-1001",
        "name": "Silk Dress",
        "description": "Knee-length silk dress",
        "price": 72.0,
        "quantity": 18,
        "category": "dress",
        "supplier": "SINDH",
    },
    {
        "sku": "SR-2002",
        "name": "Classic Saree",
        "price": 98.0,
        "quantity": 10,
        "category": "saree",
        "supplier": "SINDH",
    },
]

SAMPLE_MOVEMENTS = [
    {"sku": "DRS-1001", "type": "OUT", "quantity": 3, "reason": "store sale"},
    {"sku": "SR-2002", "type": "IN", "quantity": 5, "reason": "supplier delivery"},
    {"sku": "SR-2002", "type": "ADJUSTMENT", "quantity": -1, "reason": "damaged in transit"},
]


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample products into the ledger.")
    parser.add_argument(
        "--with-movements",
        action="store_true",
        help="Also record a few sample stock movements.",
    )
    parser.add_argument(
        "--performed-by",
        default="seed-script",
        help="Identity recorded on sample movements.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()
    settings = get_settings()

    ledger = connect_ledger(settings)
    try:
        created = 0
        for product in SAMPLE_PRODUCTS:
            try:
                create_product(ledger, dict(product))
            except ProductExistsError:
                print(f"{product['sku']}: already exists, skipped")
                continue
            created += 1
            print(f"{product['sku']}: created")

        if args.with_movements:
            for movement in SAMPLE_MOVEMENTS:
                result = record_transaction(
                    ledger,
                    movement,
                    performed_by=args.performed_by,
                    history_limit=settings.HISTORY_SCAN_LIMIT,
                    sync_product_stock=settings.SYNC_PRODUCT_STOCK,
                )
                transaction = result["transaction"]
                print(
                    f"  {transaction['sku']} {transaction['type']} "
                    f"{transaction['quantity_change']} ({transaction['transaction_id']})"
                )
    except LedgerError as exc:
        raise SystemExit(f"Seed failed: {exc.message}") from exc
    finally:
        ledger.close()

    print(f"Seed complete, {created} product(s) created.")


if __name__ == "__main__":
    main()
