"""
Invoice routes.

Role-based access:
- Landlord: invoices on contracts it owns; status changes, reminders, sweep
- Tenant: read own invoices and their PDF
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.api.deps import get_session, get_actor, get_landlord_id, get_text_notifier
from roomrent.cron import run_invoice_sweep
from roomrent.database.models import Invoice
from roomrent.errors import ForbiddenError
from roomrent.schemas.invoices import (
    InvoiceResponse, InvoiceStatusUpdate, InvoicePayment, NotificationResult, SweepResult
)
from roomrent.services import invoice_service
from roomrent.services.access import Actor, ActorRole, can_access_invoice
from roomrent.services.document_service import render_invoice_document
from roomrent.services.notification_service import TextNotifier

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


async def _get_accessible_invoice(session: AsyncSession, invoice_id: int, actor: Actor) -> Invoice:
    invoice = await invoice_service.get_invoice(session, invoice_id)
    landlord_id = await invoice_service.get_invoice_landlord_id(session, invoice)
    if not can_access_invoice(actor, invoice, landlord_id):
        raise ForbiddenError("Access denied")
    return invoice


async def _get_owned_invoice(session: AsyncSession, invoice_id: int, landlord_id: int) -> Invoice:
    return await _get_accessible_invoice(session, invoice_id, Actor(ActorRole.landlord, landlord_id))


@router.get("", response_model=List[InvoiceResponse])
async def list_invoices(
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_actor)
):
    if actor.is_landlord:
        return await invoice_service.list_invoices(session, landlord_id=actor.id)
    return await invoice_service.list_invoices(session, tenant_id=actor.id)


@router.post("/sweep", response_model=SweepResult)
async def run_sweep(
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    """Run the monthly invoice sweep now (operational recovery)"""
    today = date.today()
    created = await run_invoice_sweep(session, today.month, today.year)
    return SweepResult(month=today.month, year=today.year, created=created)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: int,
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_actor)
):
    return await _get_accessible_invoice(session, invoice_id, actor)


@router.get("/{invoice_id}/pdf")
async def get_invoice_pdf(
    invoice_id: int,
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_actor)
):
    await _get_accessible_invoice(session, invoice_id, actor)
    content = await render_invoice_document(session, invoice_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="invoice-{invoice_id}.pdf"'}
    )


@router.patch("/{invoice_id}/status", response_model=InvoiceResponse)
async def update_status(
    invoice_id: int,
    body: InvoiceStatusUpdate,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    await _get_owned_invoice(session, invoice_id, landlord_id)
    return await invoice_service.update_status(session, invoice_id, body.status, body.paid_date)


@router.post("/{invoice_id}/pay", response_model=InvoiceResponse)
async def mark_as_paid(
    invoice_id: int,
    body: Optional[InvoicePayment] = None,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    await _get_owned_invoice(session, invoice_id, landlord_id)
    return await invoice_service.mark_as_paid(session, invoice_id, body.paid_date if body else None)


@router.post("/{invoice_id}/notify", response_model=NotificationResult)
async def send_notification(
    invoice_id: int,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id),
    notifier: TextNotifier = Depends(get_text_notifier)
):
    await _get_owned_invoice(session, invoice_id, landlord_id)
    sent = await invoice_service.send_invoice_notification(session, invoice_id, notifier)
    return NotificationResult(invoice_id=invoice_id, sent=sent)
