"""aireset: archive, reset and restore the mutable files of an AI workspace."""

__version__ = "0.1.0"
