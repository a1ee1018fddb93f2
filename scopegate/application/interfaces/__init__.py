"""Application ports (Protocols) implemented by infrastructure."""

from scopegate.application.interfaces.services import (
    IAssignmentStore,
    ICacheService,
    IConsoleClient,
    IPermissionResolver,
)

__all__ = [
    "IAssignmentStore",
    "ICacheService",
    "IConsoleClient",
    "IPermissionResolver",
]
