"""Balance analytics."""

from capital.analytics.config import AnalyticsConfig, TopListConfig

__all__ = ["AnalyticsConfig", "TopListConfig"]
