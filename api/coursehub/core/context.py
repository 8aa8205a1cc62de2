"""Per-request identifiers carried in contextvars.

The middleware binds a request id on entry and clears it on exit; the auth
dependency adds the caller's id once a token is verified. Log processors
read both without them being threaded through service calls.
"""

from contextvars import ContextVar
from uuid import UUID, uuid4


_request_id: ContextVar[str | None] = ContextVar("coursehub_request_id", default=None)
_actor_id: ContextVar[str | None] = ContextVar("coursehub_actor_id", default=None)


def set_request_id(request_id: str | None = None) -> str:
    """Bind the request id, generating one when the client sent none."""
    value = request_id or uuid4().hex
    _request_id.set(value)
    return value


def get_request_id() -> str | None:
    return _request_id.get()


def set_user_id(user_id: str | UUID | None) -> None:
    _actor_id.set(None if user_id is None else str(user_id))


def get_context() -> dict[str, str]:
    """Bound identifiers, skipping the unset ones."""
    bound = {"request_id": _request_id.get(), "user_id": _actor_id.get()}
    return {key: value for key, value in bound.items() if value}


def clear_context() -> None:
    _request_id.set(None)
    _actor_id.set(None)
