from .provisioner import DefaultBrowserProvisioner, ProvisionResult
from .errors import InstallError, InvalidInputError, ProvisionError

__all__ = [
    "DefaultBrowserProvisioner",
    "ProvisionResult",
    "ProvisionError",
    "InvalidInputError",
    "InstallError",
]
