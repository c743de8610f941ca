"""Flow building: ordering collections and notes into an order of service."""

__version__ = "1.0.0"
