"""Territory world: deterministic tile world generation and faction claims."""

__version__ = "0.1.0"
