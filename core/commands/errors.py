"""
Till Command Layer — Domain Errors
=====================================
Error types raised by engines when a command cannot be honoured.

Engines raise; the CommandBus catches RegisterError and turns it
into a REJECTED CommandResult. Anything that is not a RegisterError
is a programming error and propagates.
"""

from __future__ import annotations

from core.commands.rejection import ReasonCode


class RegisterError(Exception):
    """Base error for all rejected register operations."""

    code = ReasonCode.VALIDATION_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(RegisterError, ValueError):
    """Bad numeric input or empty required field."""

    code = ReasonCode.VALIDATION_ERROR


class InvalidAmount(RegisterError, ValueError):
    """Monetary amount outside the accepted range."""

    code = ReasonCode.INVALID_AMOUNT


class NotAuthenticated(RegisterError):
    code = ReasonCode.NOT_AUTHENTICATED

    def __init__(self, message: str = "An authenticated employee is required."):
        super().__init__(message)


class InvalidCredentials(RegisterError):
    """Unknown user, wrong password and inactive status look the same."""

    code = ReasonCode.INVALID_CREDENTIALS

    def __init__(self):
        super().__init__("Invalid username or password.")


class Forbidden(RegisterError):
    code = ReasonCode.FORBIDDEN


class NotFound(RegisterError):
    """Unknown product, receipt or employee id."""

    code = ReasonCode.NOT_FOUND

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} '{identifier}' not found.")


class OutOfStock(RegisterError):
    code = ReasonCode.OUT_OF_STOCK

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product '{product_id}' is out of stock.")


class InsufficientStock(RegisterError):
    code = ReasonCode.INSUFFICIENT_STOCK

    def __init__(self, product_id: str, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock: {available} available, "
            f"{requested} requested for product '{product_id}'."
        )


class InvalidBundle(RegisterError):
    code = ReasonCode.INVALID_BUNDLE


class InsufficientDrawerBalance(RegisterError):
    code = ReasonCode.INSUFFICIENT_DRAWER_BALANCE

    def __init__(self, balance, requested):
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Drawer holds {balance}, cannot debit {requested}."
        )


class AlreadyVoided(RegisterError):
    code = ReasonCode.ALREADY_VOIDED

    def __init__(self, receipt_id: str):
        self.receipt_id = receipt_id
        super().__init__(f"Receipt '{receipt_id}' is already voided.")
