"""
Persistence Gateway Factory
===========================

Factory pattern for creating persistence gateways based on configuration.
"""

import logging
from typing import Literal

from django.conf import settings

from .django_gateway import DjangoPersistenceGateway
from .interface import PersistenceGatewayInterface
from .memory_gateway import InMemoryPersistenceGateway

logger = logging.getLogger(__name__)

PersistenceBackend = Literal["django", "memory"]


class PersistenceFactory:
    """
    Factory for creating persistence gateway instances.

    Usage:
        # In settings.py
        PERSISTENCE_BACKEND = 'django'  # or 'memory' for tests

        # In your code
        gateway = PersistenceFactory.create()
    """

    @staticmethod
    def create(backend: PersistenceBackend | None = None) -> PersistenceGatewayInterface:
        """
        Create a persistence gateway.

        Args:
            backend: 'django' or 'memory'. If None, reads settings.PERSISTENCE_BACKEND

        Raises:
            ValueError: If backend type is invalid
        """
        backend_type = backend or getattr(settings, "PERSISTENCE_BACKEND", "django")

        logger.info(f"Creating persistence gateway: {backend_type}")

        if backend_type == "django":
            return DjangoPersistenceGateway()
        elif backend_type == "memory":
            return InMemoryPersistenceGateway()
        else:
            raise ValueError(f"Invalid persistence backend: {backend_type}. Must be 'django' or 'memory'")
