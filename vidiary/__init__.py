"""Video diary core: durable clip storage, partition cache and view handles."""

__version__ = "0.1.0"
