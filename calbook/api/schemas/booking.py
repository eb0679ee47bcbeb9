from pydantic import BaseModel


class BookAppointmentRequest(BaseModel):
    # Presence is checked by the booking service so that every missing field
    # gets the same 400 response.
    name: str | None = None
    email: str | None = None
    dateTime: str | None = None
