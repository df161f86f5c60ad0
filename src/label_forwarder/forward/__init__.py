"""Forward package"""
from .forwarder import Forwarder
from .results import BatchReport, ThreadResult

__all__ = ['Forwarder', 'BatchReport', 'ThreadResult']
