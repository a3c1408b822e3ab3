"""Live client connections."""

from .registry import ClientRegistry, RegistryUnavailable, InvalidClientData
