"""Forward unread labeled mail to a functional mailbox"""
import logging

from .envelope import build_envelope, forward_subject
from .results import BatchReport, ThreadResult

logger = logging.getLogger(__name__)


class Forwarder:
    """
    Forwards every unread message under a label to one destination

    Each unread message is sent on to config.destination and then marked
    read. A thread that fails is recorded in the batch report and the run
    moves on to the next thread. Delivery is at-least-once: if marking read
    fails after a send, the next run sends the message again.
    """

    def __init__(self, provider, config):
        """
        Initialize forwarder

        Args:
            provider: MailboxProvider for the account being scanned
            config: ForwarderConfig with destination and label_name
        """
        self.provider = provider
        self.config = config

    @property
    def destination(self):
        return self.config.destination

    @property
    def category(self):
        return self.config.category.lower()

    def _unread_threads(self, label):
        threads = self.provider.list_threads(label)
        return threads, [thread for thread in threads if thread.is_unread()]

    def run(self):
        """
        Forward all unread messages under the configured label

        Returns:
            BatchReport with one ThreadResult per unread thread attempted
        """
        label_name = self.config.label_name
        report = BatchReport(label_name=label_name)

        try:
            label = self.provider.find_label_by_name(label_name)
            if label is None:
                logger.info(f"Label \"{label_name}\" not found. Please create this label in Gmail.")
                report.label_found = False
                return report

            _, unread_threads = self._unread_threads(label)
        except Exception as e:
            logger.error(f"Error in forwarding run for label \"{label_name}\": {e}")
            raise

        total = len(unread_threads)
        logger.info(f"Found {total} unread {self.category} emails to process")

        for index, thread in enumerate(unread_threads, 1):
            result = self._process_isolated(thread)
            report.add(result)
            if result.ok:
                logger.info(f"Processed thread {index}/{total}: {result.subject}")

        logger.info(report.summary())
        return report

    def _process_isolated(self, thread):
        result = ThreadResult(thread_id='<unknown>', subject='')
        try:
            result.thread_id = thread.get_id()
            result.subject = thread.get_first_message_subject()
            for _ in self._forward_unread(thread):
                result.forwarded += 1
        except Exception as e:
            result.error = f"{type(e).__name__}: {e}"
            logger.error(
                f"Error processing thread {result.thread_id} \"{result.subject}\": {e}",
                exc_info=logger.isEnabledFor(logging.DEBUG)
            )
        return result

    def _forward_unread(self, thread):
        """Yield each unread message once it has been sent, then mark it read"""
        for message in thread.get_messages():
            if not message.is_unread():
                continue
            self.forward_message(message)
            yield message
            message.mark_read()

    def process_thread(self, thread):
        """
        Forward and mark read each unread message of a thread

        Messages are handled in the order the provider returns them. An
        exception stops the thread; earlier messages stay read.

        Returns:
            Number of messages forwarded
        """
        return sum(1 for _ in self._forward_unread(thread))

    def forward_message(self, message):
        """Send one message on to the destination, with its attachments"""
        subject = forward_subject(message.get_subject())
        body = build_envelope(message, category=self.config.category)
        attachments = message.get_attachments()

        if attachments:
            self.provider.send(
                self.destination,
                subject,
                body,
                attachments=attachments,
                html_body=body
            )
        else:
            self.provider.send(self.destination, subject, body)

        logger.info(
            f"Forwarded {self.category}: \"{message.get_subject()}\" "
            f"to functional mailbox {self.destination}"
        )

    def check_setup(self):
        """
        Report whether the label exists and how much mail is waiting

        Read-only: nothing is sent and nothing is marked read.

        Returns:
            True if the label exists, False otherwise
        """
        label_name = self.config.label_name
        logger.info("Testing label forwarder setup...")

        label = self.provider.find_label_by_name(label_name)
        if label is None:
            logger.warning(f"\"{label_name}\" label not found. Please create this label in Gmail.")
            return False
        logger.info(f"\"{label_name}\" label found")

        threads, unread_threads = self._unread_threads(label)
        logger.info(f"Found {len(threads)} total emails with \"{label_name}\" label")
        logger.info(
            f"Found {len(unread_threads)} unread {self.category} emails "
            f"ready for forwarding to functional mailbox"
        )
        logger.info(f"Functional mailbox configured: {self.destination}")
        logger.info("Setup test completed successfully")
        return True

