"""
Base service for business logic layer.
Services orchestrate business operations using repositories and own the
request's transaction.
"""

from contextlib import contextmanager
from typing import Generic, TypeVar
from abc import ABC
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, ServiceError

RepositoryType = TypeVar("RepositoryType")

_DEPTH_KEY = "service_tx_depth"


class BaseService(Generic[RepositoryType], ABC):
    """
    Base service providing logging helpers and transaction scoping.
    All service classes should inherit from this class.
    """

    def __init__(self, db: Session, logger_name: str):
        self.db = db
        self.logger = logging.getLogger(logger_name)

    def log_info(self, message: str, **kwargs):
        """Log info message with structured data"""
        extra_data = " ".join([f"{k}={v}" for k, v in kwargs.items()])
        self.logger.info(f"{message} {extra_data}".strip())

    def log_warning(self, message: str, **kwargs):
        """Log warning message with structured data"""
        extra_data = " ".join([f"{k}={v}" for k, v in kwargs.items()])
        self.logger.warning(f"{message} {extra_data}".strip())

    @contextmanager
    def transaction(self, action: str, **context):
        """
        Run one externally visible operation as a single transaction.

        Only the outermost block commits or rolls back, so services can call
        each other's public operations while sharing one session. Integrity
        errors from racing inserts surface as ConflictError.
        """
        depth = self.db.info.get(_DEPTH_KEY, 0)
        self.db.info[_DEPTH_KEY] = depth + 1
        outermost = depth == 0
        try:
            yield
            if outermost:
                self.db.commit()
        except IntegrityError as exc:
            if outermost:
                self.db.rollback()
            self.log_warning(f"{action} integrity_error", **context)
            raise ConflictError(
                "Operation conflicts with existing data",
                details={"action": action},
            ) from exc
        except ServiceError as exc:
            if outermost:
                self.db.rollback()
                self.log_warning(f"{action} failed", code=exc.code, **context)
            raise
        except Exception:
            if outermost:
                self.db.rollback()
                self.logger.exception("Error during %s %s", action, context)
            raise
        finally:
            self.db.info[_DEPTH_KEY] = depth
