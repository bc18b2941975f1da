from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class DoctorBase(SQLModel):
    name: str
    specialty: str | None = None


class Doctor(DoctorBase, table=True):
    __tablename__ = "doctors"
    id: int | None = Field(default=None, primary_key=True)
    # Raw slot specifications as entered, e.g. "09:00-10:00" or "9:00 AM - 10:00 AM, 2:00 PM"
    available_times: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))


class DoctorPublic(DoctorBase):
    id: int
    available_times: list[str] = []
