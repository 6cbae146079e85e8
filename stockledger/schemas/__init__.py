from stockledger.schemas.product import ProductCreate
from stockledger.schemas.transaction import TransactionCreate

__all__ = ["ProductCreate", "TransactionCreate"]
