"""Integrity errors raised for bad authoring data.

These indicate a broken template or generator table rather than a player
action, so they propagate to whoever loads templates or runs generation.
"""


class TemplateError(ValueError):
    """A zone template carries a value outside the known vocabulary."""


class UnknownGeneratorError(TemplateError):
    """A layout kind has no registered generator."""

    def __init__(self, kind):
        super().__init__(f"Unknown zone generator kind: {kind!r}")
        self.kind = kind


__all__ = ["TemplateError", "UnknownGeneratorError"]
