"""Storage API: songs, sermons, asset decks, flows, slides and text content over SQL."""

__version__ = "1.0.0"
