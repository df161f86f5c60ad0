"""Mailbox capabilities the forwarder depends on"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Label:
    """A user label, identified by its display name"""
    id: str
    name: str


@dataclass(frozen=True)
class Attachment:
    """File attached to a message; forwarded byte-for-byte"""
    filename: str
    content_type: str
    data: bytes


class MailboxMessage:
    """A received message. Only the unread flag is ever changed."""

    def get_id(self):
        raise NotImplementedError

    def get_subject(self):
        raise NotImplementedError

    def get_from(self):
        raise NotImplementedError

    def get_date(self):
        raise NotImplementedError

    def get_body(self):
        raise NotImplementedError

    def get_attachments(self):
        raise NotImplementedError

    def is_unread(self):
        raise NotImplementedError

    def mark_read(self):
        raise NotImplementedError


class MailboxThread:
    """A conversation of one or more messages"""

    def get_id(self):
        raise NotImplementedError

    def get_messages(self):
        raise NotImplementedError

    def get_first_message_subject(self):
        messages = self.get_messages()
        return messages[0].get_subject() if messages else ''

    def is_unread(self):
        return any(message.is_unread() for message in self.get_messages())


class MailboxProvider:
    """Label lookup, thread listing and outbound mail for one account"""

    def find_label_by_name(self, name):
        """Return the Label called name, or None when there is none"""
        raise NotImplementedError

    def list_threads(self, label):
        """Return every thread tagged with label"""
        raise NotImplementedError

    def send(self, destination, subject, body, attachments=None, html_body=None):
        """Send a new message to a single recipient"""
        raise NotImplementedError
