"""Errors raised by world generation."""


class WorldGenerationError(Exception):
    """Base class for every world generation failure."""


class InvalidDimensionsError(WorldGenerationError, ValueError):
    """World width or height is not a positive integer."""


class NoSeaError(WorldGenerationError):
    """The sea mask has no sea cell, so continentality cannot be normalised."""


class WorldPersistenceError(WorldGenerationError):
    """A batch write failed; the world was rolled back."""
