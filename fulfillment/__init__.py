"""Order fulfillment and gift distribution for the flower shop backend."""

__version__ = "0.1.0"
