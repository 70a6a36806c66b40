"""
Result types for calls to third-party collaborators (LLM, ledger, translation).

Handlers used to swallow collaborator failures and return template text with
no signal to the caller. Services now return one of:

* ``Ok(value)``: the collaborator answered.
* ``Degraded(value, cause)``: the collaborator failed or is not configured,
  ``value`` is a deterministic fallback, ``cause`` says why.
* ``Err(cause)``: no usable value exists.
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    degraded = False


@dataclass(frozen=True)
class Degraded(Generic[T]):
    value: T
    cause: str

    degraded = True


@dataclass(frozen=True)
class Err:
    cause: str

    degraded = True


Outcome = Union[Ok[T], Degraded[T], Err]


def degradation_fields(outcome: Union[Ok, Degraded, Err]) -> Dict[str, Any]:
    """Response fields that surface degradation to API clients."""
    if isinstance(outcome, Ok):
        return {"degraded": False}
    return {"degraded": True, "degradedReason": outcome.cause}
