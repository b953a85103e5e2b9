"""pgok: read-only PostgreSQL health diagnostics."""

__version__ = "0.1.0"
