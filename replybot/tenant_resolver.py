"""Maps a WhatsApp sender to the tenant (business) it belongs to.

Lookup order for `resolve`:
    1. Staff/admin registered in `company_users` of an active client.
    2. Legacy: the client's own `whatsapp_number` (treated as saas admin).
    3. Customer of the first active client.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import mysql.connector

from .database_client import Database
from .errors import TenantResolutionError
from .models.tenant import TenantContext

logger = logging.getLogger(__name__)

_STAFF_QUERY = """
    SELECT cu.company_id, c.module, cu.role, cu.client_id
    FROM company_users cu
    JOIN clients c ON c.id = cu.client_id
    WHERE cu.phone_number = %s AND c.subscription_status = 'active'
    LIMIT 1
"""

_LEGACY_QUERY = """
    SELECT id AS company_id, 'saas' AS module, 'admin' AS role, id AS client_id
    FROM clients
    WHERE whatsapp_number = %s AND subscription_status = 'active'
    LIMIT 1
"""

_DEFAULT_QUERY = """
    SELECT id AS company_id, 'saas' AS module, 'customer' AS role, id AS client_id
    FROM clients
    WHERE subscription_status = 'active'
    LIMIT 1
"""

_BY_CLIENT_QUERY = """
    SELECT id AS company_id, COALESCE(module, 'saas') AS module
    FROM clients
    WHERE id = %s
"""


_CONTEXT_COLUMNS = ("module", "role", "company_id", "client_id")


def _to_context(row: Dict[str, Any]) -> TenantContext:
    missing = [col for col in _CONTEXT_COLUMNS if row.get(col) is None]
    if missing:
        raise TenantResolutionError(f"incomplete tenant row, NULL {', '.join(missing)}")
    return TenantContext(**{col: str(row[col]) for col in _CONTEXT_COLUMNS})


class TenantResolver:
    """MySQL-backed tenant resolver."""

    def __init__(self, db: Database):
        self.db = db

    async def resolve(self, sender_id: str) -> TenantContext:
        """Resolve the tenant for a sender.

        Raises:
            TenantResolutionError: no active client matches, or the lookup failed.
        """
        return await asyncio.to_thread(self._resolve_sync, sender_id)

    def _resolve_sync(self, sender_id: str) -> TenantContext:
        phone = sender_id[1:] if sender_id.startswith("+") else sender_id
        try:
            for query, params in (
                (_STAFF_QUERY, (phone,)),
                (_LEGACY_QUERY, (phone,)),
                (_DEFAULT_QUERY, ()),
            ):
                row = self.db.fetch_one(query, params)
                if row:
                    return _to_context(row)
        except (mysql.connector.Error, KeyError, ValueError) as e:
            raise TenantResolutionError(f"tenant lookup failed for {phone}: {e}") from e

        raise TenantResolutionError("no active client found")

    async def resolve_from_client_id(self, client_id: str) -> TenantContext:
        """Resolve context for API-originated calls (role is always admin)."""
        return await asyncio.to_thread(self._resolve_from_client_id_sync, client_id)

    def _resolve_from_client_id_sync(self, client_id: str) -> TenantContext:
        try:
            row: Optional[Dict[str, Any]] = self.db.fetch_one(_BY_CLIENT_QUERY, (client_id,))
        except mysql.connector.Error as e:
            raise TenantResolutionError(f"client lookup failed: {e}") from e
        if not row:
            raise TenantResolutionError("client not found")
        try:
            return _to_context({**row, "role": "admin", "client_id": client_id})
        except ValueError as e:
            raise TenantResolutionError(f"invalid client row for {client_id}: {e}") from e
