"""
Row-level authorization policies.

Every read and write issued by the server passes through ``enforce`` (writes)
or ``visible`` (reads) with the request-scoped ``Caller``.
"""

from .models import Caller, CallerRole, Operation, PolicyDecision, Resource
from .row_policy import PUBLIC_BUCKETS, POLICIES, enforce, evaluate, visible

__all__ = [
    "Caller",
    "CallerRole",
    "Operation",
    "POLICIES",
    "PUBLIC_BUCKETS",
    "PolicyDecision",
    "Resource",
    "enforce",
    "evaluate",
    "visible",
]
