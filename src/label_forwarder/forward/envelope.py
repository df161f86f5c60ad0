"""Forwarded message subject and body"""
from datetime import datetime

FORWARD_PREFIX = 'Fwd: '

ENVELOPE_TEMPLATE = """
---------- Forwarded {category} ----------
From: {sender}
Date: {date}
Subject: {subject}
Forwarded for: {category} Processing

{body}
"""


def forward_subject(subject):
    return f'{FORWARD_PREFIX}{subject}'


def format_date(value):
    if value is None:
        return 'Unknown'
    if isinstance(value, datetime):
        return value.strftime('%a, %d %b %Y %H:%M:%S %z').strip()
    return str(value)


def build_envelope(message, category='Invoice'):
    """
    Wrap a message's body in the forwarding envelope

    The original body is embedded verbatim after the From/Date/Subject
    block and the routing line.
    """
    return ENVELOPE_TEMPLATE.format(
        category=category,
        sender=message.get_from(),
        date=format_date(message.get_date()),
        subject=message.get_subject(),
        body=message.get_body()
    )
