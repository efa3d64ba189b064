"""
Check-in endpoint: look up a ticket code at the door.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devevent.db.session import get_db
from devevent.schemas.ticket import TicketVerification
from devevent.services.ticket_service import verify_ticket

router = APIRouter(prefix="/tickets", tags=["Tickets"])


@router.get("/{ticket_code}", response_model=TicketVerification)
async def verify_ticket_endpoint(
    ticket_code: str,
    db: AsyncSession = Depends(get_db),
):
    """Report whether a ticket code belongs to a confirmed booking."""
    return await verify_ticket(db, ticket_code)
