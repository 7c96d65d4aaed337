from .provisioner import BrowserProvisioner, DefaultBrowserProvisioner
from .models import CacheKey, CacheResult, ProvisionerSettings, ProvisionResult, StepOutcome

__all__ = [
    "BrowserProvisioner",
    "DefaultBrowserProvisioner",
    "CacheKey",
    "CacheResult",
    "ProvisionerSettings",
    "ProvisionResult",
    "StepOutcome",
]
