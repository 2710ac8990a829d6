"""Tenant context resolved once per inbound event."""
from dataclasses import dataclass, fields


@dataclass(frozen=True)
class TenantContext:
    """Business context a sender belongs to.

    Attributes:
        module: Business module ('saas', 'farmasi', 'umkm', ...).
        role: Sender role ('customer', 'admin', 'staff', ...).
        company_id: Company identifier.
        client_id: Row id in the clients table; scopes all knowledge lookups.
    """
    module: str
    role: str
    company_id: str
    client_id: str

    def __post_init__(self):
        # A context is either complete or it does not exist.
        for f in fields(self):
            if not getattr(self, f.name):
                raise ValueError(f"TenantContext.{f.name} must not be empty")
