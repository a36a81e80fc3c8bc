"""
Dashboard Use Cases

Aggregated counts for the admin console landing page.
"""

from .dashboard_use_case import DashboardUseCase

__all__ = ["DashboardUseCase"]
