"""Utilities package"""
from .logging_config import setup_logging
from .dry_run import DryRunManager, dry_run_safe

__all__ = [
    'setup_logging',
    'DryRunManager',
    'dry_run_safe'
]
