from datetime import datetime

from signup.core.errors import PreconditionError
from signup.services.snapshots import EventSnapshot


def check_eligibility(snapshot: EventSnapshot, now: datetime) -> None:
    """
    Raise PreconditionError when the event does not accept registrations at ``now``.

    A deadline equal to ``now`` is still open. Seats are not checked here because
    that needs the live count, which the ledger reads under the event lock.
    """
    if not snapshot.is_published:
        raise PreconditionError("not published")
    if snapshot.signup_deadline is not None and snapshot.signup_deadline < now:
        raise PreconditionError("deadline passed")


def seats_left(capacity: int | None, active_count: int) -> int | None:
    if capacity is None:
        return None
    return max(capacity - active_count, 0)
