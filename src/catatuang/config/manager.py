"""Deployment configuration: API keys, Google credentials, target spreadsheet."""
import json
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional

from catatuang.utils.exceptions import ConfigError
from catatuang.utils.logger import get_app_dir, get_logger

logger = get_logger()

# Environment variables that override values from config.json
ENV_OVERRIDES = {
    "llm_api_key": "GOOGLE_API_KEY",
    "service_account_path": "GOOGLE_APPLICATION_CREDENTIALS",
    "google_client_email": "GOOGLE_CLIENT_EMAIL",
    "google_private_key": "GOOGLE_PRIVATE_KEY",
    "oauth_client_secrets": "OAUTH_CLIENT_SECRETS",
    "oauth_token_path": "OAUTH_TOKEN_PATH",
    "spreadsheet_link": "SPREADSHEET_LINK",
}


@dataclass
class Config:
    """Deployment configuration."""
    llm_api_key: str = ""
    spreadsheet_link: str = ""
    # Authentication: service account (file or inline) OR OAuth
    service_account_path: Optional[str] = None
    google_client_email: Optional[str] = None
    google_private_key: Optional[str] = None
    oauth_client_secrets: Optional[str] = None
    oauth_token_path: Optional[str] = None


class ConfigManager:
    """Loads configuration from config.json with environment overrides."""
    
    def __init__(self):
        self.config_dir = get_app_dir()
        self.config_file = self.config_dir / "config.json"
    
    def load_config(self, apply_env: bool = True) -> Config:
        """Load configuration from file, then apply environment overrides unless apply_env is False."""
        values = {}
        
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    values = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigError(f"Failed to load configuration: {e}")
        
        known = {field.name for field in fields(Config)}
        unknown = set(values) - known
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {sorted(unknown)}")
        values = {key: value for key, value in values.items() if key in known}
        
        if apply_env:
            for field_name, env_name in ENV_OVERRIDES.items():
                env_value = os.getenv(env_name)
                if env_value:
                    values[field_name] = env_value
        
        return Config(**values)
    
    def save_config(self, config: Config) -> None:
        """Save configuration to config.json."""
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(asdict(config), f, indent=2)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration: {e}")
    
    def validate_config(
        self,
        config: Config,
        require_llm: bool = True,
        require_google: bool = True
    ) -> tuple[bool, str]:
        """Validate configuration values."""
        if require_llm and not config.llm_api_key:
            return False, "LLM API key is required"
        
        if not require_google:
            return True, "Configuration is valid"
        
        has_service_account = bool(config.service_account_path) and Path(config.service_account_path).exists()
        has_inline_account = bool(config.google_client_email and config.google_private_key)
        has_oauth = bool(config.oauth_client_secrets) and Path(config.oauth_client_secrets).exists()
        
        if not (has_service_account or has_inline_account or has_oauth):
            return False, "Either a service account or OAuth client secrets is required"
        
        return True, "Configuration is valid"
