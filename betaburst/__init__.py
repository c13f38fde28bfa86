"""Beta burst detection in single-channel electrophysiological recordings."""

__version__ = "1.3.0"
