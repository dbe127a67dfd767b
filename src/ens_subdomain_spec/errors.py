"""ENS subdomain registry error codes and exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ErrorCategory(IntEnum):
    SUCCESS = 0x00
    VALIDATION = 0x01
    AUTHORIZATION = 0x02
    FUNDS = 0x03
    PRECONDITION = 0x04
    COLLABORATOR = 0x05
    INTERNAL = 0xFF


class ErrorCode(IntEnum):
    # Success
    SUCCESS = 0x0000

    # Validation
    INVALID_TYPE = 0x0102
    INVALID_AMOUNT = 0x0105
    INVALID_ADDRESS = 0x0106
    INVALID_PAYLOAD = 0x0107
    INVALID_HASH = 0x0108
    CHAIN_ID_MISMATCH = 0x0109

    # Authorization
    NOT_CONTROLLER = 0x0201
    NOT_FUNDS_OWNER = 0x0202
    NOT_NODE_OWNER = 0x0203
    NOT_PARENT_REGISTRY = 0x0204

    # Funds
    INSUFFICIENT_BALANCE = 0x0300
    INSUFFICIENT_ALLOWANCE = 0x0301

    # Precondition
    DOMAIN_NOT_FOUND = 0x0400
    DOMAIN_MOVED = 0x0401
    DOMAIN_NOT_OWNED = 0x0402
    SUBDOMAIN_TAKEN = 0x0403
    ACCOUNT_NOT_FOUND = 0x0404
    RELEASE_DELAY_NOT_ELAPSED = 0x0405
    ESCROW_NOT_RELEASED = 0x0406

    # Collaborator
    CONTRACT_NOT_FOUND = 0x0500
    NODE_NOT_OWNED = 0x0501

    # Internal
    NOT_IMPLEMENTED = 0xFF01
    OVERFLOW = 0xFF02
    UNKNOWN = 0xFFFF

    @property
    def category(self) -> ErrorCategory:
        return ErrorCategory(self >> 8)


@dataclass(frozen=True)
class SpecError(Exception):
    code: ErrorCode
    message: str

    @property
    def category(self) -> ErrorCategory:
        return self.code.category

    def __str__(self) -> str:
        return f"{self.code.name}({self.code:#06x}): {self.message}"


# Allow Python's Exception machinery to set __traceback__/__context__/__cause__
# while keeping dataclass fields frozen (Python 3.13 contextlib compat).
_EXCEPTION_ATTRS = frozenset(("__traceback__", "__context__", "__cause__"))
_frozen_setattr = SpecError.__setattr__


def _spec_error_setattr(self: SpecError, name: str, value: object) -> None:
    if name in _EXCEPTION_ATTRS:
        object.__setattr__(self, name, value)
    else:
        _frozen_setattr(self, name, value)


SpecError.__setattr__ = _spec_error_setattr  # type: ignore[method-assign]


class ValidationError(SpecError):
    """Malformed transaction or payload."""


class AuthorizationError(SpecError):
    """Caller lacks the authority required for the mutation."""


class InsufficientFundsError(SpecError):
    """Token pull rejected for lack of balance or allowance."""


class PreconditionError(SpecError):
    """Time gate not satisfied or target already in a conflicting state."""


class CollaboratorError(SpecError):
    """Name registry, resolver or target registry rejected a call."""


_CATEGORY_ERRORS: dict[ErrorCategory, type[SpecError]] = {
    ErrorCategory.VALIDATION: ValidationError,
    ErrorCategory.AUTHORIZATION: AuthorizationError,
    ErrorCategory.FUNDS: InsufficientFundsError,
    ErrorCategory.PRECONDITION: PreconditionError,
    ErrorCategory.COLLABORATOR: CollaboratorError,
}


def err(code: ErrorCode, message: str) -> SpecError:
    cls = _CATEGORY_ERRORS.get(code.category, SpecError)
    return cls(code=code, message=message)
