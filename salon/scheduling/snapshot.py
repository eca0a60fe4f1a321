"""Latest appointment snapshot guarded by a generation counter.

Reads never patch the held records in place: every read fetches the whole
list and offers it as the new snapshot, and a write throws it away. Every fetch
and every write bumps the generation, so a fetch that started before a newer
fetch or write cannot overwrite what came after it.
"""

from __future__ import annotations

from collections.abc import Iterable

from salon.core.logging import get_logger
from salon.scheduling.models import AppointmentRecord

logger = get_logger(__name__)


class AppointmentSnapshot:
    """Holds the most recent complete appointment fetch.

    Usage:
        token = snapshot.begin_fetch()
        records = await list_appointments(db)
        snapshot.publish(token, records)
    """

    def __init__(self) -> None:
        self._generation = 0
        self._published_generation: int | None = None
        self._records: tuple[AppointmentRecord, ...] = ()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def records(self) -> tuple[AppointmentRecord, ...]:
        return self._records

    @property
    def is_fresh(self) -> bool:
        """Whether the held records reflect the latest fetch and every write."""
        return self._published_generation == self._generation

    def begin_fetch(self) -> int:
        """Start a fetch and return the token its result must be published with."""
        self._generation += 1
        return self._generation

    def publish(self, token: int, records: Iterable[AppointmentRecord]) -> bool:
        """Replace the snapshot with a fetch result unless it was superseded.

        Returns:
            True if the records were accepted, False if a newer fetch or a
            write started after this one.
        """
        if token != self._generation:
            logger.debug(
                "appointment_snapshot_stale",
                token=token,
                generation=self._generation,
            )
            return False
        self._records = tuple(records)
        self._published_generation = token
        return True

    def invalidate(self) -> None:
        """Drop the snapshot after a confirmed write."""
        self._generation += 1
        self._records = ()
        self._published_generation = None
