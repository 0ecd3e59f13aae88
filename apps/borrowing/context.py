"""
Group and class context for a borrower.

Group, class and semester membership is owned by another system. The
callable named by BORROWING_CONTEXT_RESOLVER receives an account and
returns a dict of display fields (for example ``group_name``,
``class_code``, ``lecturer_email``). It is read only when presenting
requests to inspectors and never affects lifecycle decisions.
"""

from django.conf import settings
from django.utils.module_loading import import_string
from loguru import logger


def empty_context(account):
    """Default resolver: no group or class information."""
    return {}


def resolve_context(account):
    """Return display context for an account, or {} if the resolver fails."""
    resolver = import_string(settings.BORROWING_CONTEXT_RESOLVER)
    try:
        return dict(resolver(account) or {})
    except Exception:
        logger.exception(f"Context resolver failed for account {account.pk}")
        return {}
