"""
Adapter exceptions and the action error taxonomy.

Action failures are InvalidActionError subclasses, one per ErrorName tag, so
callers can either catch a concrete class or discriminate on ``error.name``.
Startup failures (missing config, unusable DEX wallet) are AdapterError
subclasses and abort module load.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any


class ErrorName(str, Enum):
    """Closed set of action error names exposed to the DEX orchestrator."""

    MULTISIG_ACCOUNT_DID_NOT_EXIST = "MultisigAccountDidNotExistError"
    ACCOUNT_DID_NOT_EXIST = "AccountDidNotExistError"
    ACCOUNT_WAS_NOT_MULTISIG = "AccountWasNotMultisigError"
    BLOCK_DID_NOT_EXIST = "BlockDidNotExistError"
    TRANSACTION_DID_NOT_EXIST = "TransactionDidNotExistError"
    TRANSACTION_BROADCAST = "TransactionBroadcastError"


class AdapterError(Exception):
    """Base class for all adapter errors."""


class ConfigurationError(AdapterError):
    """Required configuration is missing or invalid."""


class MultisigResolutionError(AdapterError):
    """The configured DEX wallet could not be resolved as a multisig wallet."""


class InvalidActionError(AdapterError):
    """
    Structured action error: {name, kind, message, cause}.

    Subclasses pin ``error_name``; the base class may also be raised directly
    with an explicit ErrorName.
    """

    kind = "InvalidActionError"
    error_name: ErrorName | None = None

    def __init__(
        self,
        message: str,
        cause: BaseException | Any | None = None,
        *,
        name: ErrorName | None = None,
    ) -> None:
        super().__init__(message)
        resolved = name or self.error_name
        if resolved is None:
            raise TypeError("InvalidActionError requires an ErrorName")
        self.name = ErrorName(resolved)
        self.message = message
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        cause = self.cause
        if isinstance(cause, BaseException):
            cause = str(cause) or type(cause).__name__
        return {
            "name": self.name.value,
            "kind": self.kind,
            "message": self.message,
            "cause": cause,
        }

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class MultisigAccountDidNotExistError(InvalidActionError):
    error_name = ErrorName.MULTISIG_ACCOUNT_DID_NOT_EXIST


class AccountDidNotExistError(InvalidActionError):
    error_name = ErrorName.ACCOUNT_DID_NOT_EXIST


class AccountWasNotMultisigError(InvalidActionError):
    error_name = ErrorName.ACCOUNT_WAS_NOT_MULTISIG


class BlockDidNotExistError(InvalidActionError):
    error_name = ErrorName.BLOCK_DID_NOT_EXIST


class TransactionDidNotExistError(InvalidActionError):
    error_name = ErrorName.TRANSACTION_DID_NOT_EXIST


class TransactionBroadcastError(InvalidActionError):
    error_name = ErrorName.TRANSACTION_BROADCAST


ERROR_CLASSES: dict[ErrorName, type[InvalidActionError]] = {
    cls.error_name: cls
    for cls in (
        MultisigAccountDidNotExistError,
        AccountDidNotExistError,
        AccountWasNotMultisigError,
        BlockDidNotExistError,
        TransactionDidNotExistError,
        TransactionBroadcastError,
    )
}
