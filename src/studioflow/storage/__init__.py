"""Local persistence for settings and annotations."""

from .local_store import Annotation, AppSettings, LocalStore

__all__ = ["Annotation", "AppSettings", "LocalStore"]
