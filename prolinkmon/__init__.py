"""Monitor and decode Pro DJ Link traffic between DJ players."""

__version__ = "0.1.0"