"""Config module for the top-balance leaderboard."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from typing import Self

    from capital.config.parser import Parser
    from capital.di.registry import ServiceRegistry

DEFAULT_REFRESH_SECONDS: Final[int] = 300
DEFAULT_MAX_ENTRIES: Final[int] = 10


@dataclass(frozen=True, slots=True)
class TopListConfig:
    enabled: bool
    refresh_seconds: int
    max_entries: int


@dataclass(frozen=True, slots=True)
class AnalyticsConfig:
    top_list: TopListConfig

    @classmethod
    async def parse(cls, parser: Parser, registry: ServiceRegistry) -> Self:
        analytics = parser.enter("analytics", "Statistics computed from account balances.")
        top = analytics.enter("top-list", "A leaderboard of the richest players.")

        enabled = top.expect_bool("enabled", True, "Whether the leaderboard is computed.")
        refresh_seconds = top.expect_int(
            "refresh-seconds",
            DEFAULT_REFRESH_SECONDS,
            "How often the leaderboard is recomputed, in seconds.",
        )
        if refresh_seconds < 1:
            refresh_seconds = top.set_value(
                "refresh-seconds",
                DEFAULT_REFRESH_SECONDS,
                '"refresh-seconds" must be at least 1.',
            )
        max_entries = top.expect_int(
            "max-entries",
            DEFAULT_MAX_ENTRIES,
            "The number of players shown on the leaderboard.",
        )
        if max_entries < 1:
            max_entries = top.set_value("max-entries", DEFAULT_MAX_ENTRIES, '"max-entries" must be at least 1.')

        return cls(top_list=TopListConfig(enabled, refresh_seconds, max_entries))


__all__ = ["AnalyticsConfig", "TopListConfig"]
