"""
Repository layer exports.
"""

from db.repositories.kpi_repository import KPIRepository

__all__ = [
    "KPIRepository",
]
