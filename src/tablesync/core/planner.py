"""Last-writer-wins merge planning between two record snapshots."""

from typing import Dict, Iterable, List, Sequence

from .records import Record, SyncPlan
from ..utils.logging import get_logger


logger = get_logger("core.planner")


def index_by_id(records: Iterable[Record], side: str) -> Dict[str, Record]:
    """Index a snapshot by record id; a repeated id keeps the later record."""
    index: Dict[str, Record] = {}
    for record in records:
        if record.id in index:
            logger.warning("Duplicate record id in snapshot", side=side, record_id=record.id)
        index[record.id] = record
    return index


def _ordered_ids(local: Sequence[Record], remote: Sequence[Record]) -> List[str]:
    seen = set()
    ordered = []
    for record in list(local) + list(remote):
        if record.id not in seen:
            seen.add(record.id)
            ordered.append(record.id)
    return ordered


def plan(local: Sequence[Record], remote: Sequence[Record]) -> SyncPlan:
    """Compute the actions that bring both snapshots up to date.

    Each id is classified exactly once:

    - local only: create remotely
    - remote only: create locally
    - both, local ``updated_at`` newer: update remotely, addressed by the
      remote copy's ``remote_key`` (skipped and logged if it has none)
    - both, remote ``updated_at`` newer: update locally
    - both, equal ``updated_at``: already in sync, no action

    Resolution is whole-record; differing content under identical
    timestamps is treated as already reconciled.
    """
    local_index = index_by_id(local, "local")
    remote_index = index_by_id(remote, "remote")
    result = SyncPlan()

    for record_id in _ordered_ids(local, remote):
        local_record = local_index.get(record_id)
        remote_record = remote_index.get(record_id)

        if remote_record is None:
            result.to_create_remote.append(local_record)
        elif local_record is None:
            result.to_create_local.append(remote_record)
        elif local_record.updated_at > remote_record.updated_at:
            if remote_record.remote_key:
                result.to_update_remote.append((remote_record.remote_key, local_record))
            else:
                logger.warning(
                    "Remote record has no remote key, cannot update it",
                    record_id=record_id,
                    title=remote_record.title
                )
                result.skipped_updates.append(record_id)
        elif remote_record.updated_at > local_record.updated_at:
            result.to_update_local.append(remote_record)

    logger.info("Sync plan computed", **result.summary())
    return result
