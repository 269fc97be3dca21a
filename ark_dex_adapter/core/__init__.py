"""
Core cross-cutting pieces — the error taxonomy shared by the chain client,
resolver, poller and action dispatcher.
"""

from ark_dex_adapter.core.exceptions import (
    ERROR_CLASSES,
    AccountDidNotExistError,
    AccountWasNotMultisigError,
    AdapterError,
    BlockDidNotExistError,
    ConfigurationError,
    ErrorName,
    InvalidActionError,
    MultisigAccountDidNotExistError,
    MultisigResolutionError,
    TransactionBroadcastError,
    TransactionDidNotExistError,
)

__all__ = [
    "ERROR_CLASSES",
    "AccountDidNotExistError",
    "AccountWasNotMultisigError",
    "AdapterError",
    "BlockDidNotExistError",
    "ConfigurationError",
    "ErrorName",
    "InvalidActionError",
    "MultisigAccountDidNotExistError",
    "MultisigResolutionError",
    "TransactionBroadcastError",
    "TransactionDidNotExistError",
]
