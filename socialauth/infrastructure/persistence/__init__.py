"""Connection storage."""

from socialauth.infrastructure.persistence.di import PersistenceProvider

__all__ = ["PersistenceProvider"]
