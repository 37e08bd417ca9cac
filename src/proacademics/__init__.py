"""ProAcademics admin backend: content management API and CLI."""

__version__ = "0.1.0"
