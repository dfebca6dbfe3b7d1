"""API request and response models."""

from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..models.address import Address
from ..models.invoice import Invoice
from ..models.line_item import ItemIdSequence, LineItem
from ..pipeline.number_coercion import coerce_number


class AddressModel(BaseModel):
    """Sender or recipient contact block."""

    name: str = ""
    email: str = ""
    address: str = ""


class LineItemModel(BaseModel):
    """A single invoice line item. Quantity and price accept numeric text."""

    id: Optional[int] = Field(None, description="Unique within the invoice; assigned if omitted")
    description: str = ""
    quantity: Union[float, str] = 1.0
    price: Union[float, str] = 0.0


class InvoiceModel(BaseModel):
    """Invoice as exchanged over the API ("from"/"to" on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Invoice number, also the PDF filename stem")
    created_at: date
    due_date: date
    from_address: AddressModel = Field(default_factory=AddressModel, alias="from")
    to_address: AddressModel = Field(default_factory=AddressModel, alias="to")
    items: List[LineItemModel] = Field(default_factory=list)
    notes: str = ""
    tax_rate: Union[float, str] = 0.0
    logo: Optional[str] = Field(None, description="Optional logo as data:image/...;base64,... URI")

    def to_invoice(self) -> Invoice:
        """Convert to the domain Invoice; items without an id get fresh ones.

        Raises:
            ValueError: If item ids collide
        """
        with_ids = [item for item in self.items if item.id is not None]
        ids = ItemIdSequence(LineItem(id=item.id) for item in with_ids)
        items = [
            LineItem(
                id=item.id if item.id is not None else ids.next_id(),
                description=item.description,
                quantity=coerce_number(item.quantity),
                price=coerce_number(item.price),
            )
            for item in self.items
        ]
        return Invoice(
            id=self.id,
            created_at=self.created_at,
            due_date=self.due_date,
            from_address=Address(**self.from_address.model_dump()),
            to_address=Address(**self.to_address.model_dump()),
            items=items,
            notes=self.notes,
            tax_rate=coerce_number(self.tax_rate),
        )

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceModel":
        return cls.model_validate(invoice.to_dict())


class TotalsResponse(BaseModel):
    """Response model for the totals endpoint."""

    subtotal: float
    tax_rate: float
    tax_amount: float
    total: float
    formatted: dict = Field(default_factory=dict, description="Two-decimal strings with currency symbol")


class SendResponse(BaseModel):
    """Response model for the send endpoint."""

    invoice_id: str
    recipient: str
    message: str
    sent_at: datetime


class ErrorResponse(BaseModel):
    """Body of a 400 or 500 response, as raised through HTTPException."""

    detail: str = Field(..., description="What was wrong with the request or why rendering failed")
