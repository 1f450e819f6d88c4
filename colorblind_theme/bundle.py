"""Message bundle of the colorblind theme plugin."""

from pathlib import Path

from .core.i18n.message_bundle import MessageBundle

BUNDLE = "ThemeBundle"
MESSAGES_DIR = Path(__file__).resolve().parent / "resources" / "messages"

ThemeBundle = MessageBundle(BUNDLE, MESSAGES_DIR)
