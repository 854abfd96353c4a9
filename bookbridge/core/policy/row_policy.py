"""Row-level authorization for every table the marketplace persists.

Each (resource, operation) pair maps to one predicate::

    predicate(caller, existing, new, related) -> bool

- ``existing`` is the stored row for update/delete/select,
- ``new`` is the row as it would be written for insert/update,
- ``related`` carries parent rows a predicate needs (the conversation of a
  message, for example).

Rows may be SQLModel entities or plain mappings. A pair without a predicate is
denied. The service principal bypasses every predicate; it is only handed to
server-side hooks such as profile provisioning.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

from bookbridge.core.errors import AuthorizationError
from bookbridge.core.logging_config import get_logger

from .models import Caller, Operation, PolicyDecision, Resource

logger = get_logger(__name__)

Row = Any
RowPolicy = Callable[[Caller, Optional[Row], Optional[Row], Mapping[str, Row]], bool]
RowT = TypeVar("RowT")

PUBLIC_BUCKETS = frozenset({"book-images", "avatars"})


def field(row: Row, name: str) -> Any:
    """Read ``name`` from an entity or a mapping, ``None`` when absent."""
    if row is None:
        return None
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _is(caller: Caller, value: Any) -> bool:
    return caller.is_authenticated and value is not None and str(value) == caller.user_id


def _is_party(caller: Caller, conversation: Row) -> bool:
    return _is(caller, field(conversation, "buyer_id")) or _is(caller, field(conversation, "seller_id"))


# --- profiles -------------------------------------------------------------


def _always(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    return True


def _profile_insert(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    return _is(caller, field(new, "id"))


def _profile_update(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    return _is(caller, field(existing, "id"))


# --- books ----------------------------------------------------------------


def _book_insert(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    return _is(caller, field(new, "user_id"))


def _book_owner(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    return _is(caller, field(existing, "user_id"))


# --- orders ---------------------------------------------------------------


def _order_select(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    return _is(caller, field(existing, "buyer_id")) or _is(caller, field(existing, "seller_id"))


def _order_insert(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    return _is(caller, field(new, "buyer_id"))


# --- conversations --------------------------------------------------------


def _conversation_select(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    return _is_party(caller, existing)


def _conversation_insert(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    return _is(caller, field(new, "buyer_id")) and field(new, "buyer_id") != field(new, "seller_id")


# --- messages -------------------------------------------------------------


def _message_select(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    return _is_party(caller, related.get("conversation"))


def _message_insert(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    return _is(caller, field(new, "sender_id")) and _is_party(caller, related.get("conversation"))


def _message_update(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    if not _is_party(caller, related.get("conversation")) or _is(caller, field(existing, "sender_id")):
        return False
    # Only the read flag may change, and only from unread to read.
    for name in ("id", "conversation_id", "sender_id", "content", "created_at"):
        if field(new, name) != field(existing, name):
            return False
    return bool(field(new, "read")) and not field(existing, "read")


# --- storage --------------------------------------------------------------


def _object_read(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    return field(existing, "bucket") in PUBLIC_BUCKETS


def _object_write(caller: Caller, existing: Row, new: Row, related: Mapping[str, Row]) -> bool:
    target = new if new is not None else existing
    return field(target, "bucket") in PUBLIC_BUCKETS and caller.is_authenticated


POLICIES: Dict[Tuple[Resource, Operation], RowPolicy] = {
    (Resource.profiles, Operation.select): _always,
    (Resource.profiles, Operation.insert): _profile_insert,
    (Resource.profiles, Operation.update): _profile_update,
    (Resource.books, Operation.select): _always,
    (Resource.books, Operation.insert): _book_insert,
    (Resource.books, Operation.update): _book_owner,
    (Resource.books, Operation.delete): _book_owner,
    (Resource.orders, Operation.select): _order_select,
    (Resource.orders, Operation.insert): _order_insert,
    (Resource.conversations, Operation.select): _conversation_select,
    (Resource.conversations, Operation.insert): _conversation_insert,
    (Resource.messages, Operation.select): _message_select,
    (Resource.messages, Operation.insert): _message_insert,
    (Resource.messages, Operation.update): _message_update,
    (Resource.storage_objects, Operation.select): _object_read,
    (Resource.storage_objects, Operation.insert): _object_write,
    (Resource.storage_objects, Operation.update): _object_write,
    (Resource.storage_objects, Operation.delete): _object_write,
}


def evaluate(
    resource: Resource,
    operation: Operation,
    caller: Caller,
    *,
    existing: Optional[Row] = None,
    new: Optional[Row] = None,
    related: Optional[Mapping[str, Row]] = None,
) -> PolicyDecision:
    """
    Decide whether ``caller`` may perform ``operation`` on a row of ``resource``.

    Args:
        resource: The guarded table or store.
        operation: The access being requested.
        caller: The request-scoped identity.
        existing: Stored row (select/update/delete).
        new: Row as it would be written (insert/update).
        related: Parent rows needed by the predicate.

    Returns:
        The policy decision; never raises.
    """
    if caller.is_service:
        return PolicyDecision(True, "service principal")

    predicate = POLICIES.get((resource, operation))
    if predicate is None:
        return PolicyDecision(False, "no policy grants this operation")

    if predicate(caller, existing, new, related or {}):
        return PolicyDecision(True)
    return PolicyDecision(False, "row policy check failed")


def enforce(
    resource: Resource,
    operation: Operation,
    caller: Caller,
    *,
    existing: Optional[Row] = None,
    new: Optional[Row] = None,
    related: Optional[Mapping[str, Row]] = None,
) -> None:
    """Raise ``AuthorizationError`` unless the policy allows the operation."""
    decision = evaluate(resource, operation, caller, existing=existing, new=new, related=related)
    if not decision.allowed:
        logger.info(
            f"Policy denied {operation.value} on {resource.value} for caller={caller.user_id or caller.role.value}: "
            f"{decision.reason}"
        )
        raise AuthorizationError(resource.value, operation.value, decision.reason)


def visible(
    resource: Resource,
    caller: Caller,
    rows: Iterable[RowT],
    *,
    related: Optional[Mapping[str, Row]] = None,
) -> List[RowT]:
    """Filter ``rows`` down to those the caller may select."""
    return [
        row
        for row in rows
        if evaluate(resource, Operation.select, caller, existing=row, related=related).allowed
    ]
