"""SQLAlchemy repository for the provider snapshot store."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, insert, select

from arcdiff.domain.ports.persistence import SyncState
from arcdiff.domain.snapshot.links import ItemLink, LinkRelation

from .mappings import SYNC_STATE_ID, item_links_table, items_table, sync_state_table

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.orm import Session

    from arcdiff.domain.snapshot.links import SnapshotRecord

log = logging.getLogger(__name__)


def _dump(payload: object) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


class SqlAlchemySnapshotRepository:
    """Rows of one provider's snapshot; transactions are owned by the unit of work."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def sync_state(self) -> SyncState | None:
        stmt = select(
            sync_state_table.c.last_synced_at,
            sync_state_table.c.version,
            sync_state_table.c.item_count,
        ).where(sync_state_table.c.id == SYNC_STATE_ID)
        row = self.session.execute(stmt).one_or_none()
        if row is None:
            return None
        return SyncState(
            last_synced_at=row.last_synced_at,
            version=row.version,
            item_count=row.item_count,
        )

    def replace_all(self, records: Sequence[SnapshotRecord], *, state: SyncState) -> None:
        """Delete every item and link row, insert ``records`` and overwrite the sync state."""

        self.session.execute(delete(item_links_table))
        self.session.execute(delete(items_table))
        self.session.execute(delete(sync_state_table))

        if records:
            self.session.execute(
                insert(items_table),
                [
                    {
                        "id": record.item.id,
                        "name": record.item.name,
                        "item_type": record.item.item_type,
                        "rarity": record.item.rarity,
                        "value": record.item.value,
                        "weight": record.item.weight,
                        "icon": record.item.icon,
                        "updated_at": record.item.updated_at,
                        "cached_at": record.item.cached_at,
                        "raw_json": _dump(record.item.raw),
                    }
                    for record in records
                ],
            )
        link_rows = [
            {
                "item_id": link.item_id,
                "relation": link.relation.value,
                "related_item_id": link.related_item_id,
                "related_name": link.related_name,
                "quantity": link.quantity,
                "payload_json": _dump(link.raw_fragment),
            }
            for record in records
            for link in record.links
        ]
        if link_rows:
            self.session.execute(insert(item_links_table), link_rows)

        self.session.execute(
            insert(sync_state_table).values(
                id=SYNC_STATE_ID,
                last_synced_at=state.last_synced_at,
                version=state.version,
                item_count=state.item_count,
            )
        )

    def read_items_raw(self) -> list[object]:
        """Stored payloads ordered by case-insensitive name; malformed rows are skipped."""

        stmt = select(items_table.c.id, items_table.c.raw_json).order_by(
            func.lower(items_table.c.name), items_table.c.id
        )
        payloads: list[object] = []
        for item_id, raw_json in self.session.execute(stmt):
            try:
                payloads.append(json.loads(raw_json))
            except (TypeError, ValueError):
                log.warning("Skipping snapshot item %r with malformed stored JSON", item_id)
        return payloads

    def item_count(self) -> int:
        stmt = select(func.count()).select_from(items_table)
        return int(self.session.execute(stmt).scalar_one())

    def links_for(self, item_id: str, *, relation: LinkRelation | None = None) -> list[ItemLink]:
        stmt = select(item_links_table).where(item_links_table.c.item_id == item_id)
        if relation is not None:
            stmt = stmt.where(item_links_table.c.relation == relation.value)
        stmt = stmt.order_by(item_links_table.c.id)

        links: list[ItemLink] = []
        for row in self.session.execute(stmt).mappings():
            try:
                fragment: object = json.loads(row["payload_json"])
            except (TypeError, ValueError):
                fragment = row["payload_json"]
            links.append(
                ItemLink(
                    item_id=row["item_id"],
                    relation=LinkRelation(row["relation"]),
                    related_item_id=row["related_item_id"],
                    related_name=row["related_name"],
                    quantity=row["quantity"],
                    raw_fragment=fragment,
                )
            )
        return links


if TYPE_CHECKING:
    from typing import cast

    from arcdiff.domain.ports.persistence import SnapshotRepository

    _session_stub = cast("Session", object())
    _repo_check: SnapshotRepository = SqlAlchemySnapshotRepository(_session_stub)
