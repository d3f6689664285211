"""Exceptions raised by the protodiff collaborators."""


class ProtodiffError(Exception):
    """Base exception."""


class DiscoveryError(ProtodiffError):
    """Target discovery against the cluster failed."""


class MappingLoadError(ProtodiffError):
    """The service-to-module mapping table could not be loaded."""


class ReflectionError(ProtodiffError):
    """A live endpoint could not be introspected."""


class RegistryError(ProtodiffError):
    """The canonical registry could not provide a schema."""
