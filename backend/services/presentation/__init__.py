"""Live presentation helpers: slide cycling for auto-advancing asset decks."""

__version__ = "1.0.0"
