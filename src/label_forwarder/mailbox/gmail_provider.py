"""Gmail API implementation of the mailbox provider"""
import base64
import logging
from datetime import datetime, timezone
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from dateutil import parser as date_parser

from ..utils.dry_run import dry_run_safe
from .provider import Attachment, Label, MailboxMessage, MailboxProvider, MailboxThread

logger = logging.getLogger(__name__)

UNREAD_LABEL = 'UNREAD'


def decode_body_data(data):
    """Decode a base64url body from the Gmail API"""
    return base64.urlsafe_b64decode(data.encode('ASCII'))


def walk_parts(payload):
    """Yield every leaf MIME part of a message payload"""
    parts = payload.get('parts')
    if not parts:
        yield payload
        return
    for part in parts:
        yield from walk_parts(part)


class GmailMessage(MailboxMessage):
    """A Gmail message fetched in 'full' format"""

    def __init__(self, service, message, user_id='me'):
        self.service = service
        self.user_id = user_id
        self._message = message
        self._label_ids = set(message.get('labelIds', []))
        self._headers = self._extract_headers(message.get('payload', {}))
        self._attachments = None

    @staticmethod
    def _extract_headers(payload):
        headers = {}
        for header in payload.get('headers', []):
            name = header['name'].lower()
            if name in ('subject', 'from', 'date'):
                headers[name] = header['value']
        return headers

    def get_id(self):
        return self._message['id']

    def get_subject(self):
        return self._headers.get('subject', '')

    def get_from(self):
        return self._headers.get('from', '')

    def get_date(self):
        """Date header as a datetime, falling back to Gmail's internal date"""
        raw_date = self._headers.get('date')
        if raw_date:
            try:
                return date_parser.parse(raw_date)
            except (ValueError, OverflowError):
                logger.debug(f"Unparseable Date header on {self.get_id()}: {raw_date}")
        internal_date = self._message.get('internalDate')
        if internal_date:
            return datetime.fromtimestamp(int(internal_date) / 1000, tz=timezone.utc)
        return None

    def get_body(self):
        """HTML body when the message has one, otherwise the plain text body"""
        html_content = ''
        text_content = ''
        for part in walk_parts(self._message.get('payload', {})):
            if part.get('filename'):
                continue
            data = part.get('body', {}).get('data')
            if not data:
                continue
            decoded = decode_body_data(data).decode('utf-8', errors='replace')
            mime_type = part.get('mimeType', '')
            if mime_type == 'text/html':
                html_content += decoded
            elif mime_type == 'text/plain':
                text_content += decoded
        return html_content or text_content

    def get_attachments(self):
        if self._attachments is None:
            self._attachments = [
                self._load_attachment(part)
                for part in walk_parts(self._message.get('payload', {}))
                if part.get('filename')
            ]
        return list(self._attachments)

    def _load_attachment(self, part):
        body = part.get('body', {})
        data = body.get('data')
        if data is None and body.get('attachmentId'):
            fetched = self.service.users().messages().attachments().get(
                userId=self.user_id,
                messageId=self.get_id(),
                id=body['attachmentId']
            ).execute()
            data = fetched.get('data', '')
        return Attachment(
            filename=part['filename'],
            content_type=part.get('mimeType') or 'application/octet-stream',
            data=decode_body_data(data or '')
        )

    def is_unread(self):
        return UNREAD_LABEL in self._label_ids

    @dry_run_safe(return_value=None)
    def mark_read(self):
        self.service.users().messages().modify(
            userId=self.user_id,
            id=self.get_id(),
            body={'removeLabelIds': [UNREAD_LABEL]}
        ).execute()
        self._label_ids.discard(UNREAD_LABEL)
        logger.debug(f"Marked message {self.get_id()} as read")


class GmailThread(MailboxThread):
    """
    A Gmail thread with its messages in conversation order

    Built from a threads.list reference; the full thread is fetched on the
    first call to get_messages(). Until then the unread status comes from
    whether the listing with the UNREAD label returned this thread.
    """

    def __init__(self, service, thread_id, unread, user_id='me'):
        self.service = service
        self.user_id = user_id
        self._thread_id = thread_id
        self._unread = unread
        self._messages = None

    def get_id(self):
        return self._thread_id

    def get_messages(self):
        if self._messages is None:
            thread = self.service.users().threads().get(
                userId=self.user_id,
                id=self._thread_id,
                format='full'
            ).execute()
            self._messages = [
                GmailMessage(self.service, message, user_id=self.user_id)
                for message in thread.get('messages', [])
            ]
        return list(self._messages)

    def is_unread(self):
        if self._messages is None:
            return self._unread
        return super().is_unread()


class GmailMailboxProvider(MailboxProvider):
    """Mailbox provider backed by an authenticated Gmail API service"""

    def __init__(self, service, user_id='me'):
        """
        Initialize provider

        Args:
            service: Authenticated Gmail API service
            user_id: Mailbox owner ('me' for the authorized account)
        """
        self.service = service
        self.user_id = user_id

    def find_label_by_name(self, name):
        result = self.service.users().labels().list(userId=self.user_id).execute()
        for label in result.get('labels', []):
            if label['name'] == name:
                logger.debug(f"Label '{name}' has ID {label['id']}")
                return Label(id=label['id'], name=label['name'])
        return None

    def _list_thread_ids(self, label_ids):
        thread_ids = []
        page_token = None

        while True:
            results = self.service.users().threads().list(
                userId=self.user_id,
                labelIds=label_ids,
                pageToken=page_token
            ).execute()
            thread_ids.extend(ref['id'] for ref in results.get('threads', []))
            page_token = results.get('nextPageToken')
            if not page_token:
                break

        return thread_ids

    def list_threads(self, label):
        """
        List all threads carrying label, following page tokens

        Only thread ids are listed here; each GmailThread fetches its
        messages when they are first needed.

        Returns:
            List of GmailThread objects in listing order
        """
        thread_ids = self._list_thread_ids([label.id])
        unread_ids = set(self._list_thread_ids([label.id, UNREAD_LABEL]))

        logger.debug(
            f"Label '{label.name}' has {len(thread_ids)} threads, {len(unread_ids)} unread"
        )
        return [
            GmailThread(self.service, thread_id, thread_id in unread_ids, user_id=self.user_id)
            for thread_id in thread_ids
        ]

    @staticmethod
    def build_message(destination, subject, body, attachments=None, html_body=None):
        """
        Build the outbound MIME message

        A message without attachments or HTML is a single text/plain part.
        Otherwise the text (and HTML alternative) is followed by each
        attachment as a base64 part.
        """
        if not attachments and html_body is None:
            message = MIMEText(body, 'plain', 'utf-8')
        else:
            message = MIMEMultipart('mixed')
            content = MIMEMultipart('alternative')
            content.attach(MIMEText(body, 'plain', 'utf-8'))
            if html_body is not None:
                content.attach(MIMEText(html_body, 'html', 'utf-8'))
            message.attach(content)

            for attachment in attachments or []:
                maintype, _, subtype = attachment.content_type.partition('/')
                part = MIMEBase(maintype or 'application', subtype or 'octet-stream')
                part.set_payload(attachment.data)
                encoders.encode_base64(part)
                part.add_header('Content-Disposition', 'attachment', filename=attachment.filename)
                message.attach(part)

        message['to'] = destination
        message['subject'] = subject
        return message

    @dry_run_safe(return_value={'id': 'dry-run-message-id'})
    def send(self, destination, subject, body, attachments=None, html_body=None):
        message = self.build_message(destination, subject, body, attachments, html_body)
        raw = base64.urlsafe_b64encode(message.as_bytes()).decode()

        result = self.service.users().messages().send(
            userId=self.user_id,
            body={'raw': raw}
        ).execute()
        logger.debug(f"Sent message {result.get('id')} to {destination}")
        return result
