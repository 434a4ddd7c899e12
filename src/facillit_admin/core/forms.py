"""Shared helpers for the editor forms."""


class FormValidationError(Exception):
    """Raised when a form is rejected locally, before any remote call."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()
