"""vitestx - run Vitest from the nearest Node.js project root."""

__version__ = "0.3.0"

__all__ = ["__version__"]
