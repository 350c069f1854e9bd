"""Disk-image builders for a small teaching filesystem, with a shell command parser, text utilities, argument splitting and input scanning."""

__version__ = "0.1.0"