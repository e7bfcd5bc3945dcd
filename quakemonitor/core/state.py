"""Application state and its transitions - Pure functions.

AppState is the single canonical dataset behind every view. Transitions
return new states; only the refresh controller applies them.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime

from quakemonitor.core.earthquake import Earthquake, SourceRef, sort_newest_first


FETCH_ERROR_MESSAGE = "Unable to reach USGS service. Showing last known info."


@dataclass(frozen=True)
class AppState:
    """Process-wide dashboard state.

    Attributes:
        loading: True only while cold-loading (no data yet)
        error: User-facing message from the last failed refresh
        events: Canonical events, newest first
        last_updated: When the last refresh succeeded
        sources: Attribution for the events
    """
    loading: bool = True
    error: str | None = None
    events: tuple[Earthquake, ...] = ()
    last_updated: datetime | None = None
    sources: tuple[SourceRef, ...] = field(default_factory=tuple)

    @property
    def has_data(self) -> bool:
        return len(self.events) > 0

    @property
    def is_cold_loading(self) -> bool:
        """True when a spinner should replace the (empty) views."""
        return self.loading and not self.events

    @property
    def show_error_banner(self) -> bool:
        """The blocking banner only appears when there is nothing to show."""
        return self.error is not None and not self.events


def begin_refresh(state: AppState) -> AppState:
    """Transition for the start of a refresh.

    Pure function. A cold start shows the full loading signal; a background
    refresh leaves the visible state alone so the views do not flash.
    """
    if state.events:
        return state
    return replace(state, loading=True, error=None)


def apply_refresh_success(
    state: AppState,
    events: list[Earthquake],
    sources: list[SourceRef],
    now: datetime,
) -> AppState:
    """Transition for a successful refresh.

    Pure function. The fetched list fully replaces the previous one.

    Args:
        state: Current state
        events: Fetched events in feed order
        sources: Attribution for the events
        now: Completion time

    Returns:
        New state with events sorted newest first
    """
    return AppState(
        loading=False,
        error=None,
        events=tuple(sort_newest_first(events)),
        last_updated=now,
        sources=tuple(sources),
    )


def apply_refresh_failure(
    state: AppState,
    message: str = FETCH_ERROR_MESSAGE,
) -> AppState:
    """Transition for a failed refresh.

    Pure function. Previously shown events and last_updated are kept.
    """
    return replace(state, loading=False, error=message)


def apply_refresh_fallback(
    state: AppState,
    events: list[Earthquake],
    sources: list[SourceRef],
    message: str = FETCH_ERROR_MESSAGE,
) -> AppState:
    """Transition for a refresh that failed but was served from the cache.

    Pure function. The cached events are shown, the error is set, and
    last_updated still records the last successful network refresh.
    """
    return replace(
        state,
        loading=False,
        error=message,
        events=tuple(sort_newest_first(events)),
        sources=tuple(sources),
    )
