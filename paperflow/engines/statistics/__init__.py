"""
Statistics Engine - citation and reviewer aggregates.
"""

from paperflow.engines.statistics.statistics_service import StatisticsService

__all__ = [
    "StatisticsService",
]
