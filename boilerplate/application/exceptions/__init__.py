"""Application layer exceptions."""

from boilerplate.application.exceptions.translation import translate_storage_error

__all__ = ["translate_storage_error"]
