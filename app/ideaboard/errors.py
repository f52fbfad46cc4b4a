from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str


class AuthorizationError(Exception):
    """Actor lacks the author/admin relationship the action needs."""

    def __init__(self, action: str, target: object | None = None):
        super().__init__(action)
        self.action = action
        self.target = target


class NotFoundError(LookupError):
    pass


class DeliveryError(RuntimeError):
    """A single notification could not be delivered."""

    def __init__(self, recipient: str, message: str):
        super().__init__(f"{recipient}: {message}")
        self.recipient = recipient


def errors_by_field(errors: list[ValidationError]) -> dict[str, list[str]]:
    out: dict[str, list[str]] = {}
    for e in errors:
        out.setdefault(e.field, []).append(e.message)
    return out
