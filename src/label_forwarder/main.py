"""Main entry point for the Gmail label forwarder"""
import argparse
import logging

from label_forwarder import settings
from label_forwarder.auth import GmailAuthenticator
from label_forwarder.forward import Forwarder
from label_forwarder.mailbox import GmailMailboxProvider
from label_forwarder.scheduler import ForwardingScheduler
from label_forwarder.settings import ConfigurationError, load_config
from label_forwarder.utils import DryRunManager, setup_logging

logger = logging.getLogger(__name__)


def positive_minutes(value):
    minutes = int(value)
    if minutes < 1:
        raise argparse.ArgumentTypeError(f"interval must be at least 1 minute, got {value}")
    return minutes


def build_parser():
    parser = argparse.ArgumentParser(
        description='Forward unread Gmail messages under a label to a functional mailbox',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration is read from the environment (or a .env file):
  TARGET_EMAIL   address messages are forwarded to (required)
  LABEL_NAME     Gmail label to scan (required)

Examples:
  # Verify the label exists and see how much mail is waiting
  python run.py check-setup

  # Forward once without sending or marking anything read
  python run.py --dry-run run

  # Forward every 30 minutes until interrupted
  python run.py watch --interval 30
        """
    )

    parser.add_argument('--dry-run', action='store_true',
                        help='Log sends and mark-reads instead of performing them')
    parser.add_argument('--log-level', default=settings.LOG_LEVEL,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Console logging level (default: INFO)')
    parser.add_argument('--log-file', default=settings.LOG_FILE,
                        help='Rotating log file (default: logs/forwarder.log)')

    commands = parser.add_subparsers(dest='command', required=True)
    commands.add_parser('run', help='Forward unread labeled messages once')
    commands.add_parser('check-setup', help='Check the label and report waiting mail')
    watch = commands.add_parser('watch', help='Forward on a fixed interval until stopped')
    watch.add_argument('--interval', type=positive_minutes, default=settings.SCHEDULE_INTERVAL_MINUTES,
                       help='Minutes between runs (default: 30)')

    return parser


def build_forwarder(config):
    authenticator = GmailAuthenticator(
        scopes=settings.SCOPES,
        credentials_file=settings.CREDENTIALS_FILE,
        token_file=settings.TOKEN_FILE
    )
    provider = GmailMailboxProvider(authenticator.authenticate())
    return Forwarder(provider, config)


def main(argv=None, forwarder_factory=build_forwarder):
    """Main entry point; returns the process exit status"""
    args = build_parser().parse_args(argv)

    setup_logging(log_level=args.log_level, log_file=args.log_file)

    try:
        config = load_config()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    if args.dry_run:
        DryRunManager.enable()

    logger.info(f"Label: {config.label_name} -> {config.destination}")
    logger.debug(f"Dry-run mode: {DryRunManager.is_enabled()}")

    forwarder = forwarder_factory(config)

    if args.command == 'check-setup':
        return 0 if forwarder.check_setup() else 1

    if args.command == 'watch':
        scheduler = ForwardingScheduler(forwarder.run, interval_minutes=args.interval)
        scheduler.install_signal_handlers()
        scheduler.install()
        return 0

    forwarder.run()
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
