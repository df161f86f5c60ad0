"""Gmail API authentication"""
import logging
import os

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

logger = logging.getLogger(__name__)


class GmailAuthenticator:
    """Handles Gmail API authentication"""

    def __init__(self, scopes, credentials_file, token_file):
        """
        Initialize authenticator

        Args:
            scopes: List of OAuth2 scopes
            credentials_file: Path to the OAuth client secrets (credentials.json)
            token_file: Path where the authorized user token is cached
        """
        self.scopes = scopes
        self.credentials_file = str(credentials_file)
        self.token_file = str(token_file)
        self.creds = None

    def load_credentials(self):
        """Load cached credentials, refreshing or re-authorizing as needed"""
        if os.path.exists(self.token_file):
            logger.debug(f"Loading credentials from {self.token_file}")
            self.creds = Credentials.from_authorized_user_file(self.token_file, self.scopes)

        if self.creds and self.creds.valid:
            return self.creds

        if self.creds and self.creds.expired and self.creds.refresh_token:
            logger.info("Refreshing expired credentials")
            self.creds.refresh(Request())
        else:
            if not os.path.exists(self.credentials_file):
                raise FileNotFoundError(
                    f"Credentials file not found: {self.credentials_file}\n"
                    "Download an OAuth client (Desktop app) from Google Cloud Console"
                )
            logger.info("Starting OAuth2 flow for new credentials")
            flow = InstalledAppFlow.from_client_secrets_file(self.credentials_file, self.scopes)
            self.creds = flow.run_local_server(port=0)

        logger.info(f"Saving credentials to {self.token_file}")
        os.makedirs(os.path.dirname(self.token_file) or '.', exist_ok=True)
        with open(self.token_file, 'w') as token:
            token.write(self.creds.to_json())

        return self.creds

    def authenticate(self):
        """
        Authenticate with the Gmail API

        Returns:
            Gmail API service object
        """
        creds = self.load_credentials()
        logger.debug("Building Gmail API service")
        return build('gmail', 'v1', credentials=creds, cache_discovery=False)
