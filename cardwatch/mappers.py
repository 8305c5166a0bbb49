"""
Mappers to convert between DB models and entities
DB (SQLAlchemy) <-> entities (Pydantic)
"""
from cardwatch.database.models import AccountRecord, TransactionRecord
from cardwatch.entities import Account, Transaction


def map_account_record(record: AccountRecord) -> Account:
    """
    Convert AccountRecord (SQLAlchemy) → Account (Pydantic)
    """
    return Account(
        account_no=record.account_no,
        holder_name=record.holder_name,
        credit_limit=record.credit_limit,
        home_region=record.home_region,
        status=record.status
    )


def map_transaction_record(record: TransactionRecord) -> Transaction:
    """
    Convert TransactionRecord (SQLAlchemy) → Transaction (Pydantic)
    """
    return Transaction(
        transaction_id=record.transaction_id,
        account_no=record.account_no,
        merchant=record.merchant,
        category=record.category,
        amount=record.amount,
        transaction_date=record.transaction_date,
        alert=record.alert
    )


def map_transaction_to_record(transaction: Transaction) -> TransactionRecord:
    """
    Convert Transaction (Pydantic) → TransactionRecord (SQLAlchemy)
    created_at/updated_at are left to column defaults
    """
    return TransactionRecord(
        transaction_id=transaction.transaction_id,
        account_no=transaction.account_no,
        merchant=transaction.merchant,
        category=transaction.category,
        amount=transaction.amount,
        transaction_date=transaction.transaction_date,
        alert=transaction.alert
    )


def map_account_to_record(account: Account) -> AccountRecord:
    """
    Convert Account (Pydantic) → AccountRecord (SQLAlchemy)
    """
    return AccountRecord(
        account_no=account.account_no,
        holder_name=account.holder_name,
        credit_limit=account.credit_limit,
        home_region=account.home_region,
        status=account.status
    )
