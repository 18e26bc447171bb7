"""Monitoring dashboard source package.

This package contains:
- config: Configuration loading and management
- monitoring: Time window navigation and live metrics synchronization
"""

from __future__ import annotations

__all__: list[str] = []
