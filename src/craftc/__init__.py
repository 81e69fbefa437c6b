"""craftc - a fast, minimal incremental build driver for C projects."""

__version__ = "0.5.4"
