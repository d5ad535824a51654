"""Election lifecycle: status is always derived from the voting window.

The ``status`` stored on an election is only a cache of the last evaluation.
Every read path and every vote re-derives it from ``[start_date, end_date)``
and the current time, and writes it back when it changed.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from ovs.models.base import as_utc, utcnow
from ovs.models.election_model import Election, ElectionStatus
from ovs.storage import ElectionRepository

logger = logging.getLogger(__name__)


def derive_status(now: datetime, start_date: datetime, end_date: datetime) -> ElectionStatus:
    """Return the status of a window at ``now``.

    The start instant is already ``ongoing`` and the end instant is already
    ``ended``, so the three statuses partition the timeline.
    """
    now, start_date, end_date = as_utc(now), as_utc(start_date), as_utc(end_date)
    if now < start_date:
        return ElectionStatus.UPCOMING
    if now >= end_date:
        return ElectionStatus.ENDED
    return ElectionStatus.ONGOING


def refresh_status(election: Election, now: datetime) -> Tuple[bool, ElectionStatus]:
    """Derive the current status; ``updated`` is True when the stored one is stale."""
    new_status = derive_status(now, election.start_date, election.end_date)
    return new_status != election.status, new_status


def refresh_election(
    elections: ElectionRepository, election: Election, now: Optional[datetime] = None
) -> Election:
    """Refresh ``election`` in place and persist the status if it changed."""
    updated, new_status = refresh_status(election, now or utcnow())
    if updated:
        logger.info(
            f"Election {election.id} status {getattr(election.status, 'value', election.status)}"
            f" -> {new_status.value}"
        )
        # Idempotent, concurrent readers may store the same value
        elections.set_status(election.id, new_status)
        election.status = new_status
    return election


def refresh_elections(
    elections: ElectionRepository, items: Iterable[Election], now: Optional[datetime] = None
) -> List[Election]:
    now = now or utcnow()
    return [refresh_election(elections, election, now) for election in items]
