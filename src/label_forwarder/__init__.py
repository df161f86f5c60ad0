"""Forward unread Gmail messages under a label to a functional mailbox"""

__version__ = '1.0.0'
