"""keyrelay: rotating-credential relay for a text-generation provider."""

__version__ = "0.1.0"
