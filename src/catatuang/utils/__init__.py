"""Utility modules."""
from .logger import get_logger, set_chat_context, get_app_dir
from .exceptions import (
    CatatUangError,
    ConfigError,
    NetworkError,
    LLMError,
    SheetsError,
    ValidationError,
    RetryableError,
    RetryableNetworkError,
    RetryableLLMError
)
from .retry import retry_with_backoff
from .processing_registry import ProcessingRegistry

__all__ = [
    "get_logger",
    "set_chat_context",
    "get_app_dir",
    "CatatUangError",
    "ConfigError",
    "NetworkError",
    "LLMError",
    "SheetsError",
    "ValidationError",
    "RetryableError",
    "RetryableNetworkError",
    "RetryableLLMError",
    "retry_with_backoff",
    "ProcessingRegistry"
]
