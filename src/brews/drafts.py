"""Validated brew entries ready to be sent to the proxy."""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from records.models import Record
from shared_types import BrewField, CoffeeField


class CoffeeChoice(BaseModel):
    """The coffee a brew is logged against, snapshotted at brew time."""

    record_id: str
    name: str
    origin: Optional[str] = None
    roaster: Optional[str] = None
    varietal: Optional[str] = None
    process: Optional[str] = None
    is_personal: bool = False

    @classmethod
    def from_record(cls, record: Record, is_personal: bool = False) -> "CoffeeChoice":
        return cls(
            record_id=record.id,
            name=record.get(CoffeeField.NAME) or f"Coffee {record.id}",
            origin=record.get(CoffeeField.ORIGIN),
            roaster=record.get(CoffeeField.ROASTER),
            varietal=record.get(CoffeeField.VARIETAL),
            process=record.get(CoffeeField.PROCESS),
            is_personal=is_personal,
        )


class BrewDraft(BaseModel):
    coffee: CoffeeChoice
    brewer: str = Field(..., min_length=1)
    dose: float = Field(..., gt=0)
    drink_weight: float = Field(..., gt=0)
    enjoyment: int = Field(..., ge=0, le=10)
    brew_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    brew_method: Optional[str] = None
    grinder: Optional[str] = None
    grind_size: Optional[str] = None
    total_brew_time: Optional[int] = Field(None, ge=0)  # seconds
    pours: Optional[int] = Field(None, ge=0)
    water_temperature: Optional[float] = None
    notes: Optional[str] = None
    recipe: Optional[str] = None

    @field_validator("brewer")
    @classmethod
    def strip_brewer(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("brewer must not be blank")
        return v

    def to_fields(self, coffee_link: Optional[str] = None) -> dict[str, Any]:
        """Store fields, with the coffee snapshot and an optional link."""
        fields: dict[str, Any] = {
            BrewField.COFFEE_NAME.value: self.coffee.name,
            BrewField.BREW_DATE.value: self.brew_date.isoformat(),
            BrewField.BREWER.value: self.brewer,
            BrewField.DOSE.value: self.dose,
            BrewField.DRINK_WEIGHT.value: self.drink_weight,
            BrewField.ENJOYMENT.value: self.enjoyment,
        }
        if coffee_link:
            fields[BrewField.COFFEE.value] = [coffee_link]

        optional = {
            BrewField.COFFEE_ORIGIN: self.coffee.origin,
            BrewField.COFFEE_ROASTER: self.coffee.roaster,
            BrewField.COFFEE_VARIETAL: self.coffee.varietal,
            BrewField.COFFEE_PROCESS: self.coffee.process,
            BrewField.BREW_METHOD: self.brew_method,
            BrewField.GRINDER: self.grinder,
            BrewField.GRIND_SIZE: self.grind_size,
            BrewField.TOTAL_BREW_TIME: self.total_brew_time,
            BrewField.POURS: self.pours,
            BrewField.WATER_TEMPERATURE: self.water_temperature,
            BrewField.NOTES: self.notes,
            BrewField.RECIPE: self.recipe,
        }
        for name, value in optional.items():
            if value is None or value == "":
                continue
            fields[name.value] = value
        return fields
