from datetime import date
from typing import Any, Literal, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator, model_validator

from .errors import ValidationFailure
from .models import ContactInfo, Passenger


class FormModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class SearchForm(FormModel):
    origin: str = Field(alias="from", min_length=1)
    destination: str = Field(alias="to", min_length=1)
    day: date = Field(alias="date")

    @model_validator(mode="after")
    def _different_endpoints(self):
        if self.origin == self.destination:
            raise ValueError("Departure and arrival must differ")
        return self

    @field_validator("day")
    @classmethod
    def _not_in_past(cls, value: date) -> date:
        if value < date.today():
            raise ValueError("Date cannot be in the past")
        return value


class PassengerEntry(FormModel):
    seat: int
    first_name: str = Field(alias="firstName", min_length=2)
    last_name: str = Field(alias="lastName", min_length=2)
    id_no: str = Field(alias="idNo", pattern=r"^[0-9]{11}$")
    gender: Literal["male", "female"]

    def to_passenger(self) -> Passenger:
        return Passenger(
            seat=self.seat,
            first_name=self.first_name,
            last_name=self.last_name,
            id_no=self.id_no,
            gender=self.gender,
        )


class ContactEntry(FormModel):
    email: EmailStr
    phone: str = Field(pattern=r"^[0-9]{10,11}$")


class Agreements(FormModel):
    privacy: bool
    terms: bool

    @field_validator("privacy", "terms")
    @classmethod
    def _must_accept(cls, value: bool) -> bool:
        if not value:
            raise ValueError("You must accept this agreement")
        return value


class PassengerForm(FormModel):
    passengers: list[PassengerEntry]
    contact: ContactEntry
    agreements: Agreements

    def to_passengers(self) -> list[Passenger]:
        return [p.to_passenger() for p in self.passengers]

    def to_contact(self) -> ContactInfo:
        return ContactInfo(email=str(self.contact.email), phone=self.contact.phone)


def _field_errors(exc: ValidationError) -> dict[str, str]:
    errors = {}
    for err in exc.errors():
        key = ".".join(str(part) for part in err["loc"]) or "__all__"
        msg = err["msg"]
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.setdefault(key, msg)
    return errors


def parse_form(model: type[BaseModel], data: Mapping[str, Any]):
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailure(_field_errors(exc)) from exc


def passenger_form_data(form: Mapping[str, str], seats: Sequence[int]) -> dict[str, Any]:
    """Nest the flat ``passengers-<i>-<field>`` inputs; seats come from the session."""
    passengers = []
    for idx, seat in enumerate(seats):
        prefix = f"passengers-{idx}-"
        passengers.append(
            {
                "seat": seat,
                "firstName": form.get(prefix + "firstName", ""),
                "lastName": form.get(prefix + "lastName", ""),
                "idNo": form.get(prefix + "idNo", ""),
                "gender": form.get(prefix + "gender", ""),
            }
        )
    return {
        "passengers": passengers,
        "contact": {
            "email": form.get("email", ""),
            "phone": form.get("phone", ""),
        },
        "agreements": {
            "privacy": form.get("privacy") == "on",
            "terms": form.get("terms") == "on",
        },
    }
