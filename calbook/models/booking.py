from pydantic import BaseModel


class BookingCreate(BaseModel):
    # Values as received; the booking service checks presence and parses dateTime
    name: str | None = None
    email: str | None = None
    date_time: str | None = None
