"""Utility helpers for VersionStack."""
