"""
FastAPI application entry point.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Depends, status
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from . import crud
from .actions import router as actions_router
from .config import Settings, get_settings
from .database import create_db_and_tables, get_session
from .errors import register_exception_handlers
from .models import TransactionType
from .schemas import (
    Envelope,
    TransactionCreate,
    TransactionUpdate,
    dump_transaction,
)

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    description="Personal Finance Tracker API - Track income and expenses"
)


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=settings.ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(actions_router)


# Create database tables on startup
@app.on_event("startup")
def on_startup():
    """Create database tables on application startup."""
    create_db_and_tables()
    logger.info("Database tables ready")


# Root endpoint
@app.get("/", tags=["Root"])
def read_root():
    """Root endpoint - API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs"
    }


# Health check endpoint
@app.get("/health", tags=["Root"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# ============================================
# Transaction Endpoints
# ============================================

@app.get("/api/transactions", response_model=Envelope, response_model_exclude_none=True, tags=["Transactions"])
def read_transactions(
    type: Optional[TransactionType] = None,
    category: Optional[str] = None,
    session: Session = Depends(get_session)
):
    """Get all transactions, newest first."""
    transactions = crud.list_transactions(session, type=type, category=category)
    return Envelope(success=True, data=[dump_transaction(t) for t in transactions])


@app.post("/api/transactions", response_model=Envelope, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED, tags=["Transactions"])
def create_transaction(
    transaction_data: TransactionCreate,
    session: Session = Depends(get_session)
):
    """Create a new transaction."""
    transaction = crud.create_transaction(session, transaction_data)
    return Envelope(
        success=True,
        message="Transaction added successfully",
        id=transaction.id,
        data=dump_transaction(transaction),
    )


@app.get("/api/transactions/stats/summary", response_model=Envelope, response_model_exclude_none=True, tags=["Statistics"])
def get_transaction_stats(session: Session = Depends(get_session)):
    """Get totals, balance, category and monthly breakdowns."""
    stats = crud.compute_statistics(session)
    return Envelope(success=True, data=stats.model_dump(mode="json", by_alias=True))


# Path ids stay strings so non-numeric ids reach the same checks as 0.

@app.get("/api/transactions/{transaction_id}", response_model=Envelope, response_model_exclude_none=True, tags=["Transactions"])
def read_transaction(
    transaction_id: str,
    session: Session = Depends(get_session)
):
    """Get a specific transaction by ID."""
    transaction = crud.get_transaction(session, transaction_id)
    return Envelope(success=True, data=dump_transaction(transaction))


@app.put("/api/transactions/{transaction_id}", response_model=Envelope, response_model_exclude_none=True, tags=["Transactions"])
def update_transaction(
    transaction_id: str,
    transaction_data: TransactionUpdate,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings)
):
    """Replace a transaction."""
    transaction = crud.replace_transaction(
        session,
        crud.parse_id(transaction_id),
        transaction_data,
        strict=settings.STRICT_MUTATIONS,
    )
    envelope = Envelope(success=True, message="Transaction updated successfully")
    if transaction is not None:
        envelope.data = dump_transaction(transaction)
    return envelope


@app.delete("/api/transactions/{transaction_id}", response_model=Envelope, response_model_exclude_none=True, tags=["Transactions"])
def delete_transaction(
    transaction_id: str,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings)
):
    """Permanently delete a transaction."""
    crud.delete_transaction(
        session,
        crud.parse_id(transaction_id),
        strict=settings.STRICT_MUTATIONS,
    )
    return Envelope(success=True, message="Transaction deleted successfully")
