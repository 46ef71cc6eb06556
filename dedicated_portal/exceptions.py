"""Dedicated portal exceptions.

All exceptions inherit from PortalError for easy catching.
"""


class PortalError(Exception):
    """Base exception for all dedicated portal errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class ConfigurationError(PortalError):
    """A required flag, URL or file is missing or unusable.

    Raised during startup; the command line exits before serving.
    """


class ProvisioningError(PortalError):
    """Submitting Cluster-Operator resources to Kubernetes failed."""


class AuthenticationError(PortalError):
    """Missing or invalid bearer token."""
