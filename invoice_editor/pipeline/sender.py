"""Simulated invoice delivery.

There is no mail transport: sending waits a fixed delay and always succeeds.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..config import get_send_delay_seconds
from ..models.invoice import Invoice

logger = logging.getLogger(__name__)


@dataclass
class SendResult:
    """Outcome of a send.

    Attributes:
        invoice_id: Invoice that was sent
        recipient: Email address of the "to" party
        message: User-facing confirmation
        sent_at: When the simulated delivery completed
    """

    invoice_id: str
    recipient: str
    message: str
    sent_at: datetime


async def send_invoice(invoice: Invoice, delay: Optional[float] = None) -> SendResult:
    """Pretend to email the invoice to its recipient.

    No cancellation, retry or double-submit guard here; callers disable their
    send action while a send is pending (InvoiceEditor.is_sending).

    Args:
        invoice: Invoice to send
        delay: Seconds to wait (default: get_send_delay_seconds())

    Returns:
        SendResult with the confirmation message
    """
    if delay is None:
        delay = get_send_delay_seconds()

    recipient = invoice.to_address.email
    logger.info(f"Sending invoice {invoice.id} to {recipient} (simulated, {delay}s)")
    await asyncio.sleep(delay)

    return SendResult(
        invoice_id=invoice.id,
        recipient=recipient,
        message=f"Invoice sent successfully to {recipient}!",
        sent_at=datetime.now(),
    )
