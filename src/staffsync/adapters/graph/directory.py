"""Directory source reading users from Microsoft Graph."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from .translator import parse_identity

if TYPE_CHECKING:
    from staffsync.domain.records import IdentityRecord

    from .client import GraphClient

log = getLogger(__name__)

USER_SELECT = (
    "id",
    "displayName",
    "userPrincipalName",
    "accountEnabled",
    "officeLocation",
    "department",
    "jobTitle",
    "employeeHireDate",
    "onPremisesExtensionAttributes",
)
MANAGER_EXPAND = "manager($select=id,displayName,userPrincipalName)"


class GraphDirectorySource:
    """Read every directory user, with its manager, across all result pages."""

    def __init__(self, *, graph: GraphClient) -> None:
        self._graph = graph

    def list_all(self) -> list[IdentityRecord]:
        return asyncio.run(self._list_all_async())

    async def _list_all_async(self) -> list[IdentityRecord]:
        params = {
            "$select": ",".join(USER_SELECT),
            "$expand": MANAGER_EXPAND,
            "$top": str(self._graph.page_size),
        }
        identities: list[IdentityRecord] = []
        async with self._graph.session() as session:
            async for page in session.iter_pages("users", params=params):
                identities.extend(parse_identity(user) for user in page)
                log.info("Loaded %s directory users...", len(identities))
        return identities
