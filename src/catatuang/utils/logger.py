"""Logging infrastructure with chat context."""
import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional, Union


def get_app_dir() -> Path:
    """Return the application data directory, creating it if needed."""
    base = os.getenv("CATATUANG_HOME")
    app_dir = Path(base) if base else Path.home() / ".catatuang"
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


class ChatContextFilter(logging.Filter):
    """Add chat context to log records."""
    
    def __init__(self):
        super().__init__()
        self.chat_id: Optional[str] = None
    
    def filter(self, record):
        """Add chat_id to record."""
        record.chat_id = self.chat_id or "system"
        return True


class CatatUangLogger:
    """Centralized logging manager."""
    
    def __init__(
        self,
        log_level: str = "INFO",
        max_file_size_mb: int = 10,
        backup_count: int = 30
    ):
        self.log_dir = get_app_dir() / "logs"
        self.log_dir.mkdir(parents=True, exist_ok=True)
        
        self.log_file = self.log_dir / "catatuang.log"
        self.chat_filter = ChatContextFilter()
        
        self.logger = logging.getLogger("catatuang")
        self.logger.setLevel(getattr(logging, log_level.upper()))
        
        # Remove existing handlers
        self.logger.handlers.clear()
        
        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [chat:%(chat_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        
        file_handler.setFormatter(formatter)
        console_handler.setFormatter(formatter)
        
        file_handler.addFilter(self.chat_filter)
        console_handler.addFilter(self.chat_filter)
        
        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)
    
    def set_chat_context(self, chat_id: Optional[Union[int, str]]):
        """Set current chat context for logging."""
        self.chat_filter.chat_id = str(chat_id) if chat_id is not None else None
    
    def get_logger(self) -> logging.Logger:
        """Get the configured logger."""
        return self.logger


# Global logger instance
_logger_instance: Optional[CatatUangLogger] = None


def get_logger(log_level: str = "INFO") -> logging.Logger:
    """Get or create global logger instance."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = CatatUangLogger(log_level)
    return _logger_instance.get_logger()


def configure_logging(log_level: str, max_file_size_mb: int, backup_count: int) -> logging.Logger:
    """Rebuild the global logger from loaded settings."""
    global _logger_instance
    _logger_instance = CatatUangLogger(log_level, max_file_size_mb, backup_count)
    return _logger_instance.get_logger()


def set_chat_context(chat_id: Optional[Union[int, str]]):
    """Set chat context for logging."""
    global _logger_instance
    if _logger_instance:
        _logger_instance.set_chat_context(chat_id)
