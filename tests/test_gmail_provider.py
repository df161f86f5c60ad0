"""Tests for the Gmail API mailbox provider"""
import base64
import email
from unittest.mock import MagicMock

from label_forwarder.forward import Forwarder
from label_forwarder.mailbox.gmail_provider import GmailMailboxProvider, GmailMessage
from label_forwarder.mailbox.provider import Attachment, Label
from label_forwarder.utils.dry_run import DryRunManager


def b64(data):
    if isinstance(data, str):
        data = data.encode('utf-8')
    return base64.urlsafe_b64encode(data).decode('ASCII')


def gmail_message(message_id='m1', unread=True, parts=None, headers=None):
    headers = headers or [
        {'name': 'Subject', 'value': 'Invoice #1'},
        {'name': 'From', 'value': 'Vendor <vendor@x.com>'},
        {'name': 'Date', 'value': 'Fri, 01 Mar 2024 09:30:00 +0000'},
    ]
    return {
        'id': message_id,
        'threadId': 't1',
        'labelIds': ['INBOX', 'Label_1'] + (['UNREAD'] if unread else []),
        'internalDate': '1709285400000',
        'payload': {
            'mimeType': 'multipart/mixed',
            'headers': headers,
            'parts': parts if parts is not None else [
                {
                    'mimeType': 'multipart/alternative',
                    'parts': [
                        {'mimeType': 'text/plain', 'body': {'data': b64('Amount due')}},
                        {'mimeType': 'text/html', 'body': {'data': b64('<b>Amount due</b>')}},
                    ]
                }
            ]
        }
    }


class TestGmailMessage:
    """Test GmailMessage accessors"""

    def setup_method(self):
        self.service = MagicMock()

    def test_headers_and_flags(self):
        message = GmailMessage(self.service, gmail_message())

        assert message.get_id() == 'm1'
        assert message.get_subject() == 'Invoice #1'
        assert message.get_from() == 'Vendor <vendor@x.com>'
        assert message.get_date().year == 2024
        assert message.is_unread()
        assert not GmailMessage(self.service, gmail_message(unread=False)).is_unread()

    def test_body_prefers_html(self):
        message = GmailMessage(self.service, gmail_message())

        assert message.get_body() == '<b>Amount due</b>'

    def test_body_falls_back_to_plain_text(self):
        parts = [{'mimeType': 'text/plain', 'body': {'data': b64('Plain only')}}]
        message = GmailMessage(self.service, gmail_message(parts=parts))

        assert message.get_body() == 'Plain only'

    def test_date_falls_back_to_internal_date(self):
        headers = [{'name': 'Subject', 'value': 'No date'}]
        message = GmailMessage(self.service, gmail_message(headers=headers))

        assert message.get_date().isoformat() == '2024-03-01T09:30:00+00:00'

    def test_attachments_are_fetched(self):
        parts = [
            {'mimeType': 'text/plain', 'body': {'data': b64('See attached')}},
            {
                'mimeType': 'application/pdf',
                'filename': 'invoice.pdf',
                'body': {'attachmentId': 'att-1', 'size': 8}
            },
        ]
        attachments_api = self.service.users.return_value.messages.return_value.attachments.return_value
        attachments_api.get.return_value.execute.return_value = {'data': b64(b'%PDF-1.4')}
        message = GmailMessage(self.service, gmail_message(parts=parts))

        assert message.get_attachments() == [Attachment('invoice.pdf', 'application/pdf', b'%PDF-1.4')]
        attachments_api.get.assert_called_once_with(userId='me', messageId='m1', id='att-1')
        assert message.get_body() == 'See attached'

    def test_mark_read_removes_unread_label(self):
        message = GmailMessage(self.service, gmail_message())

        message.mark_read()

        modify = self.service.users.return_value.messages.return_value.modify
        modify.assert_called_once_with(userId='me', id='m1', body={'removeLabelIds': ['UNREAD']})
        assert not message.is_unread()

    def test_mark_read_skipped_in_dry_run(self):
        message = GmailMessage(self.service, gmail_message())
        DryRunManager.enable()

        message.mark_read()

        self.service.users.return_value.messages.return_value.modify.assert_not_called()
        assert message.is_unread()


class TestGmailMailboxProvider:
    """Test GmailMailboxProvider"""

    def setup_method(self):
        self.service = MagicMock()
        self.users = self.service.users.return_value
        self.provider = GmailMailboxProvider(self.service)

    def test_find_label_by_name(self):
        self.users.labels.return_value.list.return_value.execute.return_value = {
            'labels': [{'id': 'INBOX', 'name': 'INBOX'}, {'id': 'Label_7', 'name': 'Invoices'}]
        }

        assert self.provider.find_label_by_name('Invoices') == Label(id='Label_7', name='Invoices')
        assert self.provider.find_label_by_name('invoices') is None

    def test_list_threads_follows_pages(self):
        threads_api = self.users.threads.return_value
        threads_api.list.return_value.execute.side_effect = [
            {'threads': [{'id': 't1'}], 'nextPageToken': 'page-2'},
            {'threads': [{'id': 't2'}]},
            {'threads': [{'id': 't2'}]},
        ]
        threads_api.get.return_value.execute.return_value = {
            'id': 't2', 'messages': [gmail_message('m2'), gmail_message('m3', unread=False)]
        }

        threads = self.provider.list_threads(Label(id='Label_7', name='Invoices'))

        assert [thread.get_id() for thread in threads] == ['t1', 't2']
        assert [thread.is_unread() for thread in threads] == [False, True]
        threads_api.get.assert_not_called()

        assert [m.get_id() for m in threads[1].get_messages()] == ['m2', 'm3']
        threads_api.get.assert_called_once_with(userId='me', id='t2', format='full')

        calls = threads_api.list.call_args_list
        assert calls[0].kwargs['labelIds'] == ['Label_7']
        assert calls[1].kwargs['pageToken'] == 'page-2'
        assert calls[2].kwargs['labelIds'] == ['Label_7', 'UNREAD']

    def test_thread_is_fetched_once(self):
        threads_api = self.users.threads.return_value
        threads_api.list.return_value.execute.side_effect = [
            {'threads': [{'id': 't1'}]},
            {'threads': [{'id': 't1'}]},
        ]
        threads_api.get.return_value.execute.return_value = {
            'id': 't1', 'messages': [gmail_message('m1')]
        }
        thread = self.provider.list_threads(Label(id='Label_7', name='Invoices'))[0]

        thread.get_first_message_subject()
        thread.get_messages()

        assert threads_api.get.call_count == 1

    def test_read_threads_are_never_fetched(self, config):
        threads_api = self.users.threads.return_value
        self.users.labels.return_value.list.return_value.execute.return_value = {
            'labels': [{'id': 'Label_7', 'name': 'Invoices'}]
        }
        threads_api.list.return_value.execute.side_effect = [
            {'threads': [{'id': f't{n}'} for n in range(50)]},
            {},
        ]

        report = Forwarder(self.provider, config).run()

        assert report.attempted == 0
        threads_api.get.assert_not_called()

    def test_failed_thread_fetch_does_not_stop_the_batch(self, config):
        threads_api = self.users.threads.return_value
        self.users.labels.return_value.list.return_value.execute.return_value = {
            'labels': [{'id': 'Label_7', 'name': 'Invoices'}]
        }
        threads_api.list.return_value.execute.side_effect = [
            {'threads': [{'id': 't1'}, {'id': 't2'}]},
            {'threads': [{'id': 't1'}, {'id': 't2'}]},
        ]
        threads_api.get.return_value.execute.side_effect = [
            ConnectionError('t1 fetch failed'),
            {'id': 't2', 'messages': [gmail_message('m2')]},
        ]
        messages_api = self.users.messages.return_value
        messages_api.send.return_value.execute.return_value = {'id': 'sent-1'}

        report = Forwarder(self.provider, config).run()

        assert report.attempted == 2
        assert report.failed == 1
        assert report.failures[0].thread_id == 't1'
        assert 'ConnectionError' in report.failures[0].error
        assert messages_api.send.call_count == 1
        messages_api.modify.assert_called_once_with(
            userId='me', id='m2', body={'removeLabelIds': ['UNREAD']}
        )

    def test_send_plain_message(self):
        self.provider.send('accounting@example.com', 'Fwd: Invoice #1', 'body text')

        sent = self.users.messages.return_value.send.call_args.kwargs['body']['raw']
        parsed = email.message_from_bytes(base64.urlsafe_b64decode(sent))
        assert parsed['to'] == 'accounting@example.com'
        assert parsed['subject'] == 'Fwd: Invoice #1'
        assert parsed.get_content_type() == 'text/plain'
        assert parsed.get_payload(decode=True).decode('utf-8') == 'body text'

    def test_send_with_attachments_and_html(self):
        pdf = Attachment('invoice.pdf', 'application/pdf', b'%PDF-1.4 data')

        self.provider.send('accounting@example.com', 'Fwd: Invoice', '<p>x</p>',
                           attachments=[pdf], html_body='<p>x</p>')

        sent = self.users.messages.return_value.send.call_args.kwargs['body']['raw']
        parsed = email.message_from_bytes(base64.urlsafe_b64decode(sent))
        types = [part.get_content_type() for part in parsed.walk()]
        assert types == [
            'multipart/mixed', 'multipart/alternative', 'text/plain', 'text/html', 'application/pdf'
        ]
        attachment = list(parsed.walk())[-1]
        assert attachment.get_filename() == 'invoice.pdf'
        assert attachment.get_payload(decode=True) == b'%PDF-1.4 data'

    def test_send_skipped_in_dry_run(self):
        DryRunManager.enable()

        result = self.provider.send('accounting@example.com', 'Fwd: Invoice', 'body')

        assert result == {'id': 'dry-run-message-id'}
        self.users.messages.return_value.send.assert_not_called()
