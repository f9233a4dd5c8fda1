"""compatscan — batch-driven PHP compatibility scans."""

__version__ = "0.1.0"
