"""Configuration, data sources, generic repositories and name-derived query methods on SQLAlchemy."""

__version__ = "0.1.0"