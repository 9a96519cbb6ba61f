"""Coverage tree serving."""

from coverview.view.provider import (
    CoverageTreeProvider,
    ProviderState,
    ProviderStatus,
    TreeListener,
)

__all__ = [
    "CoverageTreeProvider",
    "ProviderState",
    "ProviderStatus",
    "TreeListener",
]
