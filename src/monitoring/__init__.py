"""Time window navigation and live metrics synchronization for dashboards."""

from .session import DashboardViewController, DashboardViewSession
from .server import create_app, run_dashboard

__all__ = [
    "DashboardViewController",
    "DashboardViewSession",
    "create_app",
    "run_dashboard",
]
