"""Authentication utilities for Google APIs."""
import os
import pickle
from typing import List, Optional

from google.oauth2 import service_account
from google_auth_oauthlib.flow import InstalledAppFlow
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from .exceptions import ConfigError
from .logger import get_logger, get_app_dir

logger = get_logger()

SCOPES = [
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/spreadsheets"
]

TOKEN_URI = "https://oauth2.googleapis.com/token"


def get_default_token_path() -> str:
    """Get default OAuth token path."""
    return str(get_app_dir() / "token.pickle")


def get_credentials(
    service_account_path: Optional[str] = None,
    client_email: Optional[str] = None,
    private_key: Optional[str] = None,
    oauth_client_secrets: Optional[str] = None,
    oauth_token_path: Optional[str] = None,
    scopes: Optional[List[str]] = None
):
    """
    Get Google API credentials.
    
    Tried in order: service account file, inline service account
    (client email + private key), OAuth 2.0 installed app flow.
    
    Args:
        service_account_path: Path to service account JSON (optional)
        client_email: Service account email (optional)
        private_key: Service account private key, newlines may be escaped (optional)
        oauth_client_secrets: Path to OAuth client secrets JSON (optional)
        oauth_token_path: Path to save/load OAuth token pickle (optional)
        scopes: OAuth scopes, defaults to Drive + Sheets
        
    Returns:
        Credentials object for Google APIs
        
    Raises:
        ConfigError: If no authentication method is configured
    """
    scopes = scopes or SCOPES
    
    if service_account_path and os.path.exists(service_account_path):
        logger.info("Using service account authentication")
        return service_account.Credentials.from_service_account_file(
            service_account_path,
            scopes=scopes
        )
    
    if client_email and private_key:
        logger.info("Using inline service account authentication")
        return service_account.Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": client_email,
                "private_key": private_key.replace("\\n", "\n"),
                "token_uri": TOKEN_URI,
            },
            scopes=scopes
        )
    
    if oauth_client_secrets:
        logger.info("Using OAuth 2.0 authentication")
        return _get_oauth_credentials(oauth_client_secrets, oauth_token_path, scopes)
    
    raise ConfigError(
        "No authentication method configured. "
        "Provide a service account (file or client email + private key) or OAuth client secrets."
    )


def _get_oauth_credentials(
    client_secrets_path: str,
    token_path: Optional[str],
    scopes: List[str]
) -> Credentials:
    """Get OAuth 2.0 credentials with automatic refresh."""
    if token_path is None:
        token_path = get_default_token_path()
    
    creds = _load_existing_credentials(token_path)
    
    if not creds or not creds.valid:
        creds = _refresh_or_authorize(creds, client_secrets_path, scopes)
        _save_credentials(creds, token_path)
    
    return creds


def _load_existing_credentials(token_path: str) -> Optional[Credentials]:
    """Load existing OAuth credentials from file."""
    if not os.path.exists(token_path):
        return None
    
    try:
        logger.debug("Loading saved OAuth credentials")
        with open(token_path, "rb") as token:
            return pickle.load(token)
    except (OSError, pickle.UnpicklingError, EOFError) as e:
        logger.warning(f"Failed to load credentials from {token_path}: {e}")
        logger.info("Deleting corrupted token file, will re-authorize")
        try:
            os.remove(token_path)
        except OSError as remove_err:
            logger.warning(f"Could not delete token file: {remove_err}")
    return None


def _refresh_or_authorize(creds: Optional[Credentials], client_secrets_path: str, scopes: List[str]) -> Credentials:
    """Refresh expired credentials or start new authorization flow."""
    if creds and creds.expired and creds.refresh_token:
        try:
            logger.info("Refreshing expired OAuth credentials")
            creds.refresh(Request())
            return creds
        except Exception as e:
            logger.warning(f"Failed to refresh credentials: {e}, will re-authorize")
    
    if not os.path.exists(client_secrets_path):
        raise ConfigError(f"OAuth client secrets not found: {client_secrets_path}")
    
    logger.info("Starting OAuth authorization flow")
    flow = InstalledAppFlow.from_client_secrets_file(client_secrets_path, scopes)
    creds = flow.run_local_server(port=0)
    logger.info("OAuth authorization successful")
    return creds


def _save_credentials(creds: Credentials, token_path: str) -> None:
    """Save OAuth credentials to file."""
    with open(token_path, "wb") as token:
        pickle.dump(creds, token)
