"""Record store backed by SharePoint lists, accessed through Microsoft Graph."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .errors import GraphAPIError
from .schema import CreatedItem, ListPayload, SitePayload
from .translator import ColumnMap, parse_lookup_entry, parse_target_record, serialize_fields

if TYPE_CHECKING:
    from collections.abc import Mapping

    from staffsync.config.graph import SharePointConfig
    from staffsync.domain.records import (
        Dimension,
        FieldName,
        FieldValue,
        LookupEntry,
        StoreId,
        TargetRecord,
    )

    from .client import GraphClient, JsonObject

log = getLogger(__name__)


class SharePointRecordStore:
    """Employee list plus one lookup list per category dimension.

    Every public method runs its own event loop so the store can be driven from
    the synchronous reconciliation engine.
    """

    def __init__(
        self,
        *,
        graph: GraphClient,
        config: SharePointConfig,
        columns: ColumnMap | None = None,
    ) -> None:
        self._graph = graph
        self._config = config
        self._columns = columns or ColumnMap()

    def _list_path(self, list_id: str) -> str:
        return f"sites/{self._config.site_id}/lists/{list_id}"

    def _items_path(self, list_id: str) -> str:
        return f"{self._list_path(list_id)}/items"

    def verify(self) -> None:
        """Check the site and every configured list exist."""

        asyncio.run(self._verify_async())

    async def _verify_async(self) -> None:
        async with self._graph.session() as session:
            site = SitePayload.model_validate(await session.get(f"sites/{self._config.site_id}"))
            log.info("SharePoint site found: %s", site.display_name or site.id)
            list_ids = [self._config.list_id, *self._config.lookup_list_ids.values()]
            for list_id in list_ids:
                found = ListPayload.model_validate(await session.get(self._list_path(list_id)))
                log.info("SharePoint list found: %s", found.display_name or found.id)

    def list_records(self) -> list[TargetRecord]:
        return asyncio.run(self._list_records_async())

    async def _list_records_async(self) -> list[TargetRecord]:
        columns = ",".join(self._columns.selected())
        params = {
            "$expand": f"fields($select={columns})",
            "$top": str(self._graph.page_size),
        }
        async with self._graph.session() as session:
            items = await session.get_all(self._items_path(self._config.list_id), params=params)
        return [parse_target_record(item, self._columns) for item in items]

    def create_record(self, fields: Mapping[FieldName, FieldValue]) -> StoreId:
        payload = serialize_fields(fields, self._columns, omit_empty=True)
        return asyncio.run(self._create_item_async(self._config.list_id, payload))

    def update_record(self, store_id: StoreId, changes: Mapping[FieldName, FieldValue]) -> None:
        payload = serialize_fields(changes, self._columns)
        if not payload:
            return
        asyncio.run(self._update_item_async(self._config.list_id, store_id, payload))

    def list_lookup_entries(self, dimension: Dimension) -> list[LookupEntry]:
        return asyncio.run(self._list_lookup_entries_async(dimension))

    async def _list_lookup_entries_async(self, dimension: Dimension) -> list[LookupEntry]:
        list_id = self._config.lookup_list_id(dimension)
        params = {
            "$expand": f"fields($select={self._columns.lookup_label_column})",
            "$top": str(self._graph.page_size),
        }
        async with self._graph.session() as session:
            items = await session.get_all(self._items_path(list_id), params=params)
        entries: list[LookupEntry] = []
        for item in items:
            entry = parse_lookup_entry(item, dimension, self._columns)
            if entry is not None:
                entries.append(entry)
        return entries

    def create_lookup_entry(self, dimension: Dimension, label: str) -> StoreId:
        list_id = self._config.lookup_list_id(dimension)
        payload: JsonObject = {self._columns.lookup_label_column: label}
        return asyncio.run(self._create_item_async(list_id, payload))

    async def _create_item_async(self, list_id: str, fields: JsonObject) -> StoreId:
        async with self._graph.session() as session:
            created = await session.post(self._items_path(list_id), json={"fields": fields})
        return _created_id(created)

    async def _update_item_async(self, list_id: str, item_id: StoreId, fields: JsonObject) -> None:
        async with self._graph.session() as session:
            await session.patch(f"{self._items_path(list_id)}/{item_id}/fields", json=fields)


def _created_id(payload: JsonObject) -> StoreId:
    try:
        return CreatedItem.model_validate(payload).id
    except ValidationError as exc:
        raise GraphAPIError("Created list item has no id") from exc
