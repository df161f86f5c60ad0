"""Authentication package"""
from .gmail_auth import GmailAuthenticator

__all__ = ['GmailAuthenticator']
