"""Registry error taxonomy.

Every rejected operation raises a :class:`RegistrarError` subclass. The
``code`` attribute is stable and used by the HTTP layer; the message mirrors
the wording callers of the registry already rely on.
"""

from __future__ import annotations


class RegistrarError(ValueError):
    """Raised when a registry operation is rejected."""

    code = "registrar_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AlreadyRegistered(RegistrarError):
    code = "already_registered"

    def __init__(self, message: str = "User already exists.") -> None:
        super().__init__(message)


class NotRegistered(RegistrarError):
    code = "not_registered"

    def __init__(self, message: str = "User does not exist.") -> None:
        super().__init__(message)


class Unauthorized(RegistrarError):
    code = "unauthorized"

    def __init__(
        self, message: str = "Address is not authorized to view this user ID."
    ) -> None:
        super().__init__(message)


class SelfSignatoryNotAllowed(RegistrarError):
    code = "self_signatory"

    def __init__(self, message: str = "You cannot add yourself as a signatory.") -> None:
        super().__init__(message)


class CooldownActive(RegistrarError):
    code = "cooldown_active"

    def __init__(self, ttl_seconds: int = 24 * 3600) -> None:
        super().__init__(
            f"You cannot approve transfer twice within {_format_window(ttl_seconds)}."
        )
        self.ttl_seconds = ttl_seconds


class TargetAlreadyRegistered(RegistrarError):
    code = "target_already_registered"

    def __init__(self, message: str = "User already registered for this address.") -> None:
        super().__init__(message)


class InsufficientApprovals(RegistrarError):
    code = "insufficient_approvals"

    def __init__(self, message: str = "Not approved for transfer.") -> None:
        super().__init__(message)


def _format_window(seconds: int) -> str:
    if seconds % 3600 == 0:
        hours = seconds // 3600
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    return f"{seconds} seconds"
