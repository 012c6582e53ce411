"""Application settings loader from YAML configuration."""
import yaml
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

from catatuang.utils.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "resources" / "config.yaml"


@dataclass
class AppSettings:
    """Application-wide settings loaded from config.yaml."""
    
    # App info
    app_name: str
    app_version: str
    
    # Logging
    log_level: str
    log_max_file_size_mb: int
    log_backup_count: int
    
    # LLM
    llm_provider: str
    llm_model_name: str
    llm_temperature: float
    llm_max_tokens: int
    llm_max_retries: int
    llm_initial_delay_seconds: float
    llm_backoff_factor: float
    
    # Retry
    retry_max_retries: int
    retry_initial_delay_seconds: float
    retry_backoff_factor: float
    
    # Sheets
    expense_sheet: str
    income_sheet: str
    sheet_columns: str
    date_format: str
    
    # Processing registry
    registry_ttl_seconds: int
    
    # Vendor cache
    vendor_cache_fuzzy_ratio: float
    
    # Assistant
    assistant_history_limit: int
    assistant_temperature: float
    
    # Google API
    google_api_scopes: list
    
    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "AppSettings":
        """Load settings from YAML file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH
        
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")
        
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
        
        try:
            return cls(
                app_name=config["app"]["name"],
                app_version=config["app"]["version"],
                log_level=config["logging"]["level"],
                log_max_file_size_mb=config["logging"]["max_file_size_mb"],
                log_backup_count=config["logging"]["backup_count"],
                llm_provider=config["llm"]["provider"],
                llm_model_name=config["llm"]["model_name"],
                llm_temperature=config["llm"]["temperature"],
                llm_max_tokens=config["llm"]["max_tokens"],
                llm_max_retries=config["llm"]["max_retries"],
                llm_initial_delay_seconds=config["llm"]["initial_delay_seconds"],
                llm_backoff_factor=config["llm"]["backoff_factor"],
                retry_max_retries=config["retry"]["max_retries"],
                retry_initial_delay_seconds=config["retry"]["initial_delay_seconds"],
                retry_backoff_factor=config["retry"]["backoff_factor"],
                expense_sheet=config["sheets"]["expense_sheet"],
                income_sheet=config["sheets"]["income_sheet"],
                sheet_columns=config["sheets"]["columns"],
                date_format=config["sheets"]["date_format"],
                registry_ttl_seconds=config["registry"]["ttl_seconds"],
                vendor_cache_fuzzy_ratio=config["vendor_cache"]["fuzzy_match_ratio"],
                assistant_history_limit=config["assistant"]["history_limit"],
                assistant_temperature=config["assistant"]["temperature"],
                google_api_scopes=config["google_api"]["scopes"]
            )
        except (KeyError, TypeError) as e:
            raise ConfigError(f"Invalid configuration file {config_path}: missing {e}")


# Global settings instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings.load()
    return _settings
