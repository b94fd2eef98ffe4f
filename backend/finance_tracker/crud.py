"""
CRUD operations (Create, Read, Update, Delete) and statistics for transactions.

Every function takes an open session and either returns a result or raises a
``FinanceTrackerError`` subclass; turning those into responses is left to the
routes.
"""

import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from .errors import InvalidTransactionId, StorageError, TransactionNotFound
from .models import Transaction, TransactionType
from .schemas import (
    CategoryTotal,
    MonthlyTotal,
    TransactionCreate,
    TransactionStats,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)

MONTHLY_ROLLUP_LIMIT = 12

# Largest id a 64-bit INTEGER primary key can hold.
MAX_ID = 2 ** 63 - 1


def parse_id(value) -> int:
    """Cast a raw id to int; anything unusable becomes 0."""
    if isinstance(value, bool):
        return 0
    try:
        transaction_id = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if abs(transaction_id) > MAX_ID:
        return 0
    return transaction_id


def _check_id(transaction_id: int) -> None:
    if not 0 < transaction_id <= MAX_ID:
        raise InvalidTransactionId()


def _driver_message(exc: SQLAlchemyError) -> str:
    return str(getattr(exc, "orig", None) or exc)


@contextmanager
def _storage_errors(session: Session, action: str):
    """Turn driver failures into ``StorageError("Error <action>: ...")``."""
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Error %s", action)
        raise StorageError(f"Error {action}: {_driver_message(exc)}") from exc


# ============================================
# Reads
# ============================================

def list_transactions(
    session: Session,
    type: Optional[TransactionType] = None,
    category: Optional[str] = None,
) -> List[Transaction]:
    """Get all transactions, newest first."""
    statement = select(Transaction)

    if type:
        statement = statement.where(Transaction.type == type)

    if category:
        statement = statement.where(Transaction.category == category)

    statement = statement.order_by(
        Transaction.date.desc(),
        Transaction.created_at.desc(),
        Transaction.id.desc(),
    )
    with _storage_errors(session, "loading transactions"):
        return list(session.exec(statement).all())


def get_transaction(session: Session, transaction_id) -> Transaction:
    """Get a specific transaction. Unusable ids are simply not found."""
    transaction_id = parse_id(transaction_id)
    transaction = None
    if transaction_id > 0:
        with _storage_errors(session, "loading transaction"):
            transaction = session.get(Transaction, transaction_id)

    if transaction is None:
        raise TransactionNotFound()

    return transaction


# ============================================
# Writes
# ============================================

def create_transaction(session: Session, data: TransactionCreate) -> Transaction:
    """Insert a new transaction and return it with its generated id."""
    transaction = Transaction(
        type=data.type,
        category=data.category,
        amount=data.amount,
        description=data.description,
        date=data.date,
    )
    with _storage_errors(session, "adding transaction"):
        session.add(transaction)
        session.commit()
        session.refresh(transaction)

    logger.info("Added %s transaction %s", transaction.type.value, transaction.id)
    return transaction


def replace_transaction(
    session: Session,
    transaction_id: int,
    data: TransactionUpdate,
    strict: bool = False,
) -> Optional[Transaction]:
    """Replace every mutable field of a transaction.

    A missing row raises ``TransactionNotFound`` when ``strict`` is set and is
    otherwise reported as a success with nothing written (returns None).
    """
    _check_id(transaction_id)

    with _storage_errors(session, "updating transaction"):
        transaction = session.get(Transaction, transaction_id)
        if transaction is None:
            if strict:
                raise TransactionNotFound()
            logger.warning("Update of missing transaction %s ignored", transaction_id)
            return None

        transaction.type = data.type
        transaction.category = data.category
        transaction.amount = data.amount
        transaction.description = data.description
        transaction.date = data.date

        session.add(transaction)
        session.commit()
        session.refresh(transaction)

    logger.info("Updated transaction %s", transaction_id)
    return transaction


def delete_transaction(session: Session, transaction_id: int, strict: bool = False) -> bool:
    """Permanently delete a transaction. Returns whether a row was removed."""
    _check_id(transaction_id)

    with _storage_errors(session, "deleting transaction"):
        transaction = session.get(Transaction, transaction_id)
        if transaction is None:
            if strict:
                raise TransactionNotFound()
            logger.warning("Delete of missing transaction %s ignored", transaction_id)
            return False

        session.delete(transaction)
        session.commit()

    logger.info("Deleted transaction %s", transaction_id)
    return True


# ============================================
# Statistics
# ============================================

def _month_bucket(session: Session):
    """Database-side YYYY-MM formatting of the transaction date."""
    dialect = session.get_bind().dialect.name
    if dialect == "sqlite":
        return func.strftime("%Y-%m", Transaction.date)
    if dialect == "postgresql":
        return func.to_char(Transaction.date, "YYYY-MM")
    return func.date_format(Transaction.date, "%Y-%m")


def _total_for(session: Session, type: TransactionType) -> float:
    statement = select(func.sum(Transaction.amount)).where(Transaction.type == type)
    return float(session.exec(statement).one() or 0)


def compute_statistics(session: Session) -> TransactionStats:
    """Totals, balance, per-category and per-month sums.

    The four reads run in the session's single transaction.
    """
    total = func.sum(Transaction.amount).label("total")
    month = _month_bucket(session).label("month")

    with _storage_errors(session, "computing statistics"):
        total_income = _total_for(session, TransactionType.income)
        total_expense = _total_for(session, TransactionType.expense)

        category_rows = session.exec(
            select(Transaction.category, Transaction.type, total)
            .group_by(Transaction.category, Transaction.type)
            .order_by(Transaction.category, Transaction.type)
        ).all()

        monthly_rows = session.exec(
            select(month, Transaction.type, total)
            .group_by(month, Transaction.type)
            .order_by(month.desc(), Transaction.type)
            .limit(MONTHLY_ROLLUP_LIMIT)
        ).all()

    return TransactionStats(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        categories=[
            CategoryTotal(category=category, type=type_, total=float(amount or 0))
            for category, type_, amount in category_rows
        ],
        monthly=[
            MonthlyTotal(month=month_, type=type_, total=float(amount or 0))
            for month_, type_, amount in monthly_rows
        ],
    )
