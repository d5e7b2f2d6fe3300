"""Invoice entities: invoices, their items, payments and mails."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from defactuur.models.base import (
    Entity,
    compact,
    format_date,
    format_datetime,
    split_addresses,
)
from defactuur.models.client import Client
from defactuur.models.state import State


class Item(Entity):
    """Line item on an invoice."""
    description: Optional[str] = None
    price: Optional[float] = None
    amount: Optional[float] = None
    vat: Optional[float] = None  # Percentage
    product_id: Optional[int] = None
    discount: Optional[float] = None
    discount_is_percentage: Optional[bool] = None
    discount_description: Optional[str] = None
    # Computed by the server
    total_without_vat: Optional[float] = None
    total_vat: Optional[float] = None
    total_with_vat: Optional[float] = None

    def to_payload(self, for_api: bool = False) -> Dict[str, Any]:
        data = {
            "description": self.description,
            "price": self.price,
            "amount": self.amount,
            "vat": self.vat,
            "product_id": self.product_id,
            "discount": self.discount,
            "discount_is_percentage": self.discount_is_percentage,
            "discount_description": self.discount_description,
        }
        if for_api:
            return compact(data)
        data.update(
            total_without_vat=self.total_without_vat,
            total_vat=self.total_vat,
            total_with_vat=self.total_with_vat,
        )
        return data


class Payment(Entity):
    """Payment registered against an invoice."""
    id: Optional[int] = None
    amount: Optional[float] = None
    paid_at: Optional[datetime] = None
    identifier: Optional[str] = None

    def to_payload(self, for_api: bool = False) -> Dict[str, Any]:
        if for_api:
            return compact({
                "amount": self.amount,
                "paid_at": format_date(self.paid_at),
                "identifier": self.identifier,
            })
        return {
            "id": self.id,
            "amount": self.amount,
            "paid_at": format_datetime(self.paid_at),
            "identifier": self.identifier,
        }


class Mail(Entity):
    """Mail sent for an invoice."""
    id: Optional[int] = None
    to: List[str] = Field(default_factory=list)
    cc: List[str] = Field(default_factory=list)
    bcc: List[str] = Field(default_factory=list)
    subject: Optional[str] = None
    text: Optional[str] = None

    @field_validator("to", "cc", "bcc", mode="before")
    @classmethod
    def split_recipients(cls, value: Any) -> Any:
        return split_addresses(value)

    def to_payload(self, for_api: bool = False) -> Dict[str, Any]:
        data = {
            "to": list(self.to),
            "cc": list(self.cc),
            "bcc": list(self.bcc),
            "subject": self.subject,
            "text": self.text,
        }
        if for_api:
            return compact({key: value or None for key, value in data.items()})
        return {"id": self.id, **data}


class Invoice(Entity):
    """A DeFactuur invoice, also used for credit notes."""
    # Assigned or computed by the server
    id: Optional[int] = None
    iid: Optional[str] = None
    state: Optional[State] = None
    generated: Optional[datetime] = None
    total: Optional[float] = None
    total_without_vat: Optional[float] = None
    total_vat: Optional[float] = None
    total_with_vat: Optional[float] = None
    payments: List[Payment] = Field(default_factory=list)

    client_id: Optional[int] = None
    client: Optional[Client] = None
    description: Optional[str] = None
    shown_remark: Optional[str] = None
    due_date: Optional[datetime] = None
    items: List[Item] = Field(default_factory=list)
    # Both or neither must be set
    vat_exception: Optional[str] = None
    vat_description: Optional[str] = None

    @field_validator("state", mode="before")
    @classmethod
    def parse_state(cls, value: Any) -> Any:
        if isinstance(value, str):
            return State(value)
        return value

    def set_client(self, client: Client) -> None:
        """Attach the full client and reference it by id."""
        self.client = client
        self.client_id = client.id

    def add_item(self, item: Item) -> None:
        self.items.append(item)

    def add_payment(self, payment: Payment) -> None:
        self.payments.append(payment)

    def has_consistent_vat_exception(self) -> bool:
        """True when vat exception and vat description are both set or both unset."""
        return bool(self.vat_exception) == bool(self.vat_description)

    def to_payload(self, for_api: bool = False) -> Dict[str, Any]:
        if for_api:
            return compact({
                "client_id": self.client_id,
                "description": self.description,
                "shown_remark": self.shown_remark,
                "due_date": format_date(self.due_date),
                "vat_exception": self.vat_exception,
                "vat_description": self.vat_description,
                "items": [item.to_payload(True) for item in self.items],
            })
        return {
            "id": self.id,
            "iid": self.iid,
            "state": str(self.state) if self.state is not None else None,
            "generated": format_datetime(self.generated),
            "client_id": self.client_id,
            "client": self.client.to_payload() if self.client else None,
            "description": self.description,
            "shown_remark": self.shown_remark,
            "due_date": format_datetime(self.due_date),
            "vat_exception": self.vat_exception,
            "vat_description": self.vat_description,
            "items": [item.to_payload() for item in self.items],
            "payments": [payment.to_payload() for payment in self.payments],
            "total": self.total,
            "total_without_vat": self.total_without_vat,
            "total_vat": self.total_vat,
            "total_with_vat": self.total_with_vat,
        }
