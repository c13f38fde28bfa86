"""Signal file loading."""

from .file_source import load_signal

__all__ = ["load_signal"]
