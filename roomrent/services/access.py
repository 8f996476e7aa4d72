"""
Contract and invoice visibility checks shared by the services and routes.

A landlord may act on contracts and invoices it owns; a tenant may only
read contracts and invoices that reference it. Room ownership is checked
where rooms are loaded (`room_service.get_room`).
"""
import enum
from dataclasses import dataclass

from roomrent.database.models import Contract, Invoice
from roomrent.errors import ForbiddenError


class ActorRole(str, enum.Enum):
    landlord = "landlord"
    tenant = "tenant"


@dataclass(frozen=True)
class Actor:
    role: ActorRole
    id: int

    @property
    def is_landlord(self) -> bool:
        return self.role == ActorRole.landlord

    @property
    def is_tenant(self) -> bool:
        return self.role == ActorRole.tenant


def can_access_contract(actor: Actor, contract: Contract) -> bool:
    if actor.is_landlord:
        return contract.landlord_id == actor.id
    if actor.is_tenant:
        return contract.tenant_id == actor.id
    return False


def can_access_invoice(actor: Actor, invoice: Invoice, landlord_id: int) -> bool:
    """`landlord_id` is the owner of the invoice's contract."""
    if actor.is_landlord:
        return landlord_id == actor.id
    if actor.is_tenant:
        return invoice.tenant_id == actor.id
    return False


def ensure_landlord(actor: Actor) -> int:
    """Return the landlord id or refuse non-landlord actors."""
    if not actor.is_landlord:
        raise ForbiddenError("Landlord role required")
    return actor.id


def ensure_contract_access(actor: Actor, contract: Contract) -> None:
    if not can_access_contract(actor, contract):
        raise ForbiddenError("Access denied")
