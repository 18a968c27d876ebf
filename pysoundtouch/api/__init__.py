"""SoundTouch HTTP API building blocks (transport, parser and mixins)."""
