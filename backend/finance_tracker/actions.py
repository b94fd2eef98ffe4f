"""
Action-multiplexed endpoint: ``GET /api?action=...`` for reads and
``POST /api`` with ``{"action": ...}`` for writes.

Outcomes travel in the envelope only; the HTTP status is always 200 once a
database session is available.
"""

import logging
from enum import Enum
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError
from sqlmodel import Session

from . import crud
from .config import Settings, get_settings
from .database import get_session
from .errors import FinanceTrackerError, InvalidAction, InvalidTransactionId, ValidationFailed
from .schemas import Envelope, TransactionCreate, TransactionUpdate, dump_transaction

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Actions"])


class Action(str, Enum):
    """Commands accepted by the action endpoint."""
    GET_ALL = "getAll"
    GET = "get"
    STATS = "stats"
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


READ_ACTIONS = {Action.GET_ALL, Action.GET, Action.STATS}
WRITE_ACTIONS = {Action.ADD, Action.UPDATE, Action.DELETE}


def _parse_action(raw, allowed) -> Action:
    try:
        action = Action(raw)
    except (TypeError, ValueError):
        action = None
    if action not in allowed:
        logger.warning("Invalid action %r", raw)
        raise InvalidAction()
    return action


def _validated(schema, payload: dict):
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailed() from exc


def run_read(session: Session, action: Action, transaction_id=None) -> Envelope:
    if action is Action.GET_ALL:
        transactions = crud.list_transactions(session)
        return Envelope(success=True, data=[dump_transaction(t) for t in transactions])

    if action is Action.GET:
        transaction = crud.get_transaction(session, transaction_id)
        return Envelope(success=True, data=dump_transaction(transaction))

    stats = crud.compute_statistics(session)
    return Envelope(success=True, data=stats.model_dump(mode="json", by_alias=True))


def run_write(session: Session, action: Action, payload: dict, strict: bool) -> Envelope:
    if action is Action.ADD:
        data = _validated(TransactionCreate, payload)
        transaction = crud.create_transaction(session, data)
        return Envelope(
            success=True,
            message="Transaction added successfully",
            id=transaction.id,
        )

    # the id is checked before the fields
    transaction_id = crud.parse_id(payload.get("id"))

    if action is Action.UPDATE:
        if transaction_id <= 0:
            raise InvalidTransactionId()
        data = _validated(TransactionUpdate, payload)
        crud.replace_transaction(session, transaction_id, data, strict=strict)
        return Envelope(success=True, message="Transaction updated successfully")

    crud.delete_transaction(session, transaction_id, strict=strict)
    return Envelope(success=True, message="Transaction deleted successfully")


@router.get("/api", response_model=Envelope, response_model_exclude_none=True)
def read_action(
    action: str = "",
    id: Optional[str] = None,
    session: Session = Depends(get_session),
):
    """Dispatch ``getAll``, ``get`` and ``stats``."""
    try:
        return run_read(session, _parse_action(action, READ_ACTIONS), id)
    except FinanceTrackerError as exc:
        return Envelope(success=False, message=exc.message)


@router.post("/api", response_model=Envelope, response_model_exclude_none=True)
def write_action(
    payload: Any = Body(default=None),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    """Dispatch ``add``, ``update`` and ``delete``."""
    if not isinstance(payload, dict):
        payload = {}
    try:
        action = _parse_action(payload.get("action", ""), WRITE_ACTIONS)
        return run_write(session, action, payload, settings.STRICT_MUTATIONS)
    except FinanceTrackerError as exc:
        return Envelope(success=False, message=exc.message)
