import logging
from dataclasses import dataclass, field

import pytz
from pytz.tzinfo import BaseTzInfo

from backend.core import config

logger = logging.getLogger(__name__)


def resolve_timezone(name: str | None) -> BaseTzInfo | None:
    if not name:
        return None

    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.error('Invalid clinic timezone %r, falling back to UTC.', name)
        return pytz.UTC


@dataclass(frozen=True)
class ResolverSettings:
    """Tunables for one availability resolver.

    ``default_slot_window_minutes`` is the interval probed by
    ``list_available_doctors`` when the caller gives no duration.
    ``collaborator_timeout_seconds`` of 0 or None disables the timeout guard.
    """

    default_slot_window_minutes: int = 30
    max_workers: int = 4
    collaborator_timeout_seconds: float | None = 10.0
    max_range_days: int = 92
    timezone: BaseTzInfo | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.default_slot_window_minutes <= 0:
            raise ValueError('default_slot_window_minutes must be positive.')
        if self.max_workers < 1:
            raise ValueError('max_workers must be at least 1.')
        if self.max_range_days < 1:
            raise ValueError('max_range_days must be at least 1.')

    @classmethod
    def from_config(cls) -> 'ResolverSettings':
        return cls(
            default_slot_window_minutes=config.DEFAULT_SLOT_WINDOW_MINUTES,
            max_workers=config.AVAILABILITY_MAX_WORKERS,
            collaborator_timeout_seconds=config.COLLABORATOR_TIMEOUT_SECONDS,
            max_range_days=config.AVAILABILITY_MAX_RANGE_DAYS,
            timezone=resolve_timezone(config.CLINIC_TIMEZONE),
        )
