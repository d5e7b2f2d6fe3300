"""Client (customer) entities."""

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from defactuur.models.base import Entity, compact, split_addresses


class Address(Entity):
    """Postal address of a client."""
    street: Optional[str] = None
    number: Optional[str] = None
    box: Optional[str] = None
    zip: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None  # ISO 3166 alpha-2
    full_address: Optional[str] = None  # Read-only, rendered by the server

    def to_payload(self, for_api: bool = False) -> Dict[str, Any]:
        data = {
            "street": self.street,
            "number": self.number,
            "box": self.box,
            "zip": self.zip,
            "city": self.city,
            "country": self.country,
        }
        if for_api:
            return compact(data)
        data["full_address"] = self.full_address
        return data


class Client(Entity):
    """A DeFactuur client."""
    id: Optional[int] = None
    cid: Optional[str] = None
    email: List[str] = Field(default_factory=list)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    vat: Optional[str] = None
    address: Optional[Address] = None
    billing_address: Optional[Address] = None
    phone: Optional[str] = None
    fax: Optional[str] = None
    cell: Optional[str] = None
    website: Optional[str] = None
    remarks: Optional[str] = None
    language: Optional[str] = None
    payment_days: Optional[int] = None
    invoiceable_by_email: Optional[bool] = None
    invoiceable_by_snailmail: Optional[bool] = None
    invoiceable_by_factr: Optional[bool] = None

    @field_validator("email", mode="before")
    @classmethod
    def split_email(cls, value: Any) -> Any:
        return split_addresses(value)

    def to_payload(self, for_api: bool = False) -> Dict[str, Any]:
        data = {
            "email": ",".join(self.email) if for_api else list(self.email),
            "first_name": self.first_name,
            "last_name": self.last_name,
            "company": self.company,
            "vat": self.vat,
            "address": self.address.to_payload(for_api) if self.address else None,
            "billing_address": (
                self.billing_address.to_payload(for_api) if self.billing_address else None
            ),
            "phone": self.phone,
            "fax": self.fax,
            "cell": self.cell,
            "website": self.website,
            "remarks": self.remarks,
            "language": self.language,
            "payment_days": self.payment_days,
            "invoiceable_by_email": self.invoiceable_by_email,
            "invoiceable_by_snailmail": self.invoiceable_by_snailmail,
            "invoiceable_by_factr": self.invoiceable_by_factr,
        }
        if for_api:
            if not self.email:
                data["email"] = None
            return compact(data)
        return {"id": self.id, "cid": self.cid, **data}
