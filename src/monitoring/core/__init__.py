"""View engine core.

- zoom: Brush gesture → window, cadence, history
- refresh: Refetch phase and loader visibility
- synchronizer: Query staleness and resubscribe decisions
- filters: Presentation-only narrowing of fetched results
"""

from .zoom import ZoomAction, ZoomResolution, resolve
from .refresh import RefreshCoordinator
from .synchronizer import QuerySynchronizer
from .filters import DisplayFilters, derive_display

__all__ = [
    "ZoomAction",
    "ZoomResolution",
    "resolve",
    "RefreshCoordinator",
    "QuerySynchronizer",
    "DisplayFilters",
    "derive_display",
]
