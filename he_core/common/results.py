# he_core/common/results.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from django.core.exceptions import ObjectDoesNotExist, ValidationError as DjangoValidationError
from django.db import DatabaseError

logger = logging.getLogger(__name__)

# Failures an upsert reports back to the feed instead of raising.
PERSISTENCE_ERRORS = (DatabaseError, DjangoValidationError, ObjectDoesNotExist, ValueError)


@dataclass(frozen=True)
class UpsertResult:
    success: bool
    message: str
    key: Optional[int] = None


def error_text(exc: Exception) -> str:
    if isinstance(exc, DjangoValidationError):
        return "; ".join(exc.messages)
    return str(exc)


def run_upsert(label: str, fn: Callable[[], int], *, success_message: str) -> UpsertResult:
    """
    Runs an upsert unit of work and folds persistence failures into a failed UpsertResult.
    `fn` owns its own transaction and returns the entity key.
    """
    try:
        key = fn()
    except PERSISTENCE_ERRORS as exc:
        logger.exception("Error upserting %s", label)
        return UpsertResult(success=False, message=f"Error: {error_text(exc)}")
    return UpsertResult(success=True, message=success_message, key=key)
