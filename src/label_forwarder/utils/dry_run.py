"""Dry-run mode: log mailbox mutations instead of performing them"""
import logging
from functools import wraps

logger = logging.getLogger(__name__)


class DryRunManager:
    """Process-wide dry-run switch"""
    _enabled = False

    @classmethod
    def enable(cls):
        cls._enabled = True
        logger.info("DRY-RUN MODE ENABLED - no mail will be sent or marked read")

    @classmethod
    def disable(cls):
        cls._enabled = False

    @classmethod
    def is_enabled(cls):
        return cls._enabled


def dry_run_safe(return_value=None):
    """
    Skip the wrapped call while dry-run mode is enabled.

    The skipped call is logged with a short rendering of its positional
    arguments (the bound instance excluded) and return_value is handed back
    to the caller instead.

    Example:
        @dry_run_safe(return_value={'id': 'dry-run'})
        def send(self, destination, subject, body):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not DryRunManager.is_enabled():
                return func(*args, **kwargs)

            shown = args[1:] if args and hasattr(args[0], func.__name__) else args
            args_str = ', '.join(repr(arg)[:60] for arg in shown[:3])
            logger.info(f"[DRY-RUN] Would call {func.__qualname__}({args_str})")
            return return_value
        return wrapper
    return decorator
