"""
Structured logging for the Ark DEX adapter.

Use get_logger(__name__) in every module; log with a snake_case event name
followed by key/value context.
"""

from ark_dex_adapter.adapter_logging.logger import get_logger

__all__ = ["get_logger"]
