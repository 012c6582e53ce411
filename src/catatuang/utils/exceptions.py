"""Custom exception classes for CatatUang."""


class CatatUangError(Exception):
    """Base exception for CatatUang."""
    pass


class ConfigError(CatatUangError):
    """Configuration-related errors."""
    pass


class NetworkError(CatatUangError):
    """Network and API-related errors."""
    pass


class LLMError(CatatUangError):
    """LLM classification errors."""
    pass


class SheetsError(CatatUangError):
    """Google Sheets errors."""
    pass


class ValidationError(CatatUangError):
    """Data validation errors."""
    pass


# Retryable errors
class RetryableError(CatatUangError):
    """Base class for errors that should trigger retry."""
    pass


class RetryableNetworkError(RetryableError, NetworkError):
    """Network errors that can be retried."""
    pass


class RetryableLLMError(RetryableError, LLMError):
    """LLM errors that can be retried."""
    pass
