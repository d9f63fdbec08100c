"""Version information for InkLocalizer."""

VERSION = "1.2.0"
