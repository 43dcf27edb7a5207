"""
Custom exceptions for the Sailor client.
"""

from typing import Optional


class SailorError(Exception):
    """Base exception for all Sailor client errors."""
    pass


class SailorConfigError(SailorError):
    """
    Error in client configuration.

    Raised when:
    - No resources are declared
    - A resource declaration is incomplete
    - Connection identity fields are missing
    """
    pass


class EmptyResourceListError(SailorConfigError):
    """No resources to manage were declared."""

    def __init__(self, message: str = "no resources to manage, declare at least one resource"):
        super().__init__(message)


class InvalidResourceError(SailorConfigError):
    """A resource declaration cannot be used as given."""
    pass


class MissingConnectionFieldError(SailorConfigError):
    """
    A required connection field is empty.

    Each subclass names one field so callers can tell which one is missing.
    """

    field_name: str = ""
    env_var: str = ""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or f"cannot connect to sailor without {self.field_name}, "
               f"either set {self.env_var} or pass it in the connection"
        )


class MissingAddressError(MissingConnectionFieldError):
    field_name = "address"
    env_var = "SAILOR_URL"


class MissingNamespaceError(MissingConnectionFieldError):
    field_name = "namespace"
    env_var = "SAILOR_NS"


class MissingAppError(MissingConnectionFieldError):
    field_name = "app"
    env_var = "SAILOR_APP"


class MissingAccessKeyError(MissingConnectionFieldError):
    field_name = "access key"
    env_var = "SAILOR_ACCESS_KEY"


class MissingSecretKeyError(MissingConnectionFieldError):
    field_name = "secret key"
    env_var = "SAILOR_SECRET_KEY"


class AcquisitionError(SailorError):
    """
    A source could not produce bytes for a resource.

    Raised when:
    - The mounted file is missing or unreadable
    - The remote endpoint returned a non-200 status
    - The transport failed
    """

    def __init__(self, message: str, resource: str = None, origin: str = None,
                 status_code: int = None):
        super().__init__(message)
        self.resource = resource
        self.origin = origin
        self.status_code = status_code


class DecodeError(SailorError):
    """
    Payload bytes could not be turned into a resource value.

    Raised when:
    - The payload is not valid JSON
    - The envelope has no _content field
    - A user supplied decoder rejected the document
    """

    def __init__(self, message: str, resource: str = None):
        super().__init__(message)
        self.resource = resource


class SecretDecodeError(DecodeError):
    """A secret record could not be decrypted with the connection keys."""
    pass


class FallbackExhaustedError(SailorError):
    """
    The primary source failed and the fallback could not serve the resource.

    This is terminal for the initial acquisition of the resource.
    """

    def __init__(self, message: str = "cannot find resource to serve, fallback fetch also failed",
                 resource: str = None, primary_error: Exception = None):
        super().__init__(message)
        self.resource = resource
        self.primary_error = primary_error


class NotLoadedError(SailorError):
    """A read happened before the first successful commit. Try again later."""
    pass


class ConfigNotLoadedError(NotLoadedError):
    def __init__(self, message: str = "configs are not loaded"):
        super().__init__(message)


class SecretsNotLoadedError(NotLoadedError):
    def __init__(self, message: str = "secrets are not loaded"):
        super().__init__(message)


class ResourceKeyError(SailorError, KeyError):
    """A loaded resource does not contain the requested key."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class ConfigKeyNotFoundError(ResourceKeyError):
    pass


class SecretKeyNotFoundError(ResourceKeyError):
    pass


class MiscNotFoundError(ResourceKeyError):
    pass
