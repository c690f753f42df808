"""VersionStack: self-hosted file versioning registry."""

__version__ = "1.0.0"
