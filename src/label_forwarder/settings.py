"""Settings and configuration management"""
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Base paths
BASE_DIR = Path(__file__).resolve().parent.parent.parent
CONFIG_DIR = BASE_DIR / "config"
LOGS_DIR = BASE_DIR / "logs"

# Values from a local .env never override the real environment
load_dotenv(override=False)

# Gmail API
SCOPES = [
    'https://www.googleapis.com/auth/gmail.modify',
    'https://www.googleapis.com/auth/gmail.send',
]
CREDENTIALS_FILE = Path(os.getenv("CREDENTIALS_FILE", str(CONFIG_DIR / "credentials.json")))
TOKEN_FILE = Path(os.getenv("TOKEN_FILE", str(CONFIG_DIR / "token.json")))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", str(LOGS_DIR / "forwarder.log"))

# Scheduling
SCHEDULE_INTERVAL_MINUTES = int(os.getenv("SCHEDULE_INTERVAL_MINUTES", "30"))

REQUIRED_VARIABLES = ('TARGET_EMAIL', 'LABEL_NAME')
DEFAULT_CATEGORY = 'Invoice'


class ConfigurationError(Exception):
    """Required configuration is missing or invalid"""


@dataclass(frozen=True)
class ForwarderConfig:
    """Immutable forwarding configuration for one process run"""
    destination: str
    label_name: str
    category: str = DEFAULT_CATEGORY


def load_config(environ=None):
    """
    Build the forwarding configuration from the environment

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        ForwarderConfig

    Raises:
        ConfigurationError: if TARGET_EMAIL or LABEL_NAME is absent or blank
    """
    if environ is None:
        environ = os.environ

    values = {name: (environ.get(name) or '').strip() for name in REQUIRED_VARIABLES}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            "Missing required environment variables: " + ", ".join(missing)
        )

    if '@' not in values['TARGET_EMAIL']:
        raise ConfigurationError(
            f"TARGET_EMAIL is not an email address: {values['TARGET_EMAIL']!r}"
        )

    return ForwarderConfig(
        destination=values['TARGET_EMAIL'],
        label_name=values['LABEL_NAME'],
        category=(environ.get('FORWARD_CATEGORY') or DEFAULT_CATEGORY).strip(),
    )
