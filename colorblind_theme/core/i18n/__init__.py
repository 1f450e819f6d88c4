"""Localized message bundles."""

from .message_bundle import MessageBundle, format_message

__all__ = ["MessageBundle", "format_message"]
