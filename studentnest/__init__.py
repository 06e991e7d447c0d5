"""StudentNest student-housing marketplace API."""

__all__: list[str] = []
__version__ = "0.1.0"
