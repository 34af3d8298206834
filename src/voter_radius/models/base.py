"""Declarative bases.

Tables live in three separate metadata collections so that ``create_all``
only ever touches what this service owns:

- ``Base`` — local cache tables created on first use (geocode cache, cached voters).
- ``SpatialBase`` — the geocoded-address table of the spatial store (read-only here).
- ``RegistryBase`` — the remote voter registry (read-only here).
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base for tables owned by this service."""


class SpatialBase(DeclarativeBase):
    """Base for the externally owned geocoded-address table."""


class RegistryBase(DeclarativeBase):
    """Base for the externally owned voter registry tables."""
