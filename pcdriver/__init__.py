"""IoT driver exposing the local PC as readable points and invokable services."""

__version__ = "0.1.0"
