"""Mailbox provider package"""
from .provider import Attachment, Label, MailboxMessage, MailboxProvider, MailboxThread
from .gmail_provider import GmailMailboxProvider

__all__ = [
    'Attachment',
    'Label',
    'MailboxMessage',
    'MailboxProvider',
    'MailboxThread',
    'GmailMailboxProvider'
]
