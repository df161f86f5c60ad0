"""Shared fixtures"""
import pytest

from label_forwarder.settings import ForwarderConfig
from label_forwarder.utils.dry_run import DryRunManager


@pytest.fixture
def config():
    return ForwarderConfig(destination='accounting@example.com', label_name='Invoices')


@pytest.fixture(autouse=True)
def reset_dry_run():
    DryRunManager.disable()
    yield
    DryRunManager.disable()
