"""Kampus: API de administración escolar multi-institución."""

__version__ = "1.0.0"
