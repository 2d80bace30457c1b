from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .slots import SlotCatalog

# Integers the database can store (signed 64-bit)
DB_INT_MIN = -2**63
DB_INT_MAX = 2**63 - 1


class BookingCreate(BaseModel):
    # Required fields are checked by the service so that a missing value is
    # reported as a 400, same as any other invalid input
    date: Optional[str] = None
    slot: Optional[int] = Field(None, ge=DB_INT_MIN, le=DB_INT_MAX)
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    def customer_fields(self) -> dict:
        return self.model_dump(include={"name", "phone", "email", "address", "notes"})


class BookingIdRequest(BaseModel):
    id: Optional[int] = Field(None, ge=DB_INT_MIN, le=DB_INT_MAX)


class SlotAvailability(BaseModel):
    slot: int
    label: str
    available: bool


class BookingResponse(BaseModel):
    """Booking record as returned to the admin and handed to notifications"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: str
    slot: int
    label: str = ""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    status: str

    @classmethod
    def from_booking(cls, booking, catalog: SlotCatalog) -> "BookingResponse":
        record = cls.model_validate(booking)
        return record.model_copy(update={"label": catalog.label(booking.slot)})


class BookResponse(BaseModel):
    success: bool = True
    id: int


class SuccessResponse(BaseModel):
    success: bool = True
