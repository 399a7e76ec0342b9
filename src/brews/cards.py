"""Display projection of a brew record."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from brews.attribution import coffee_display
from records.models import Record
from shared_types import BrewField


@dataclass
class BrewCard:
    record_id: str
    coffee_name: str
    date: str
    method: Optional[str] = None
    details: list[tuple[str, str]] = field(default_factory=list)
    rating: Optional[str] = None
    notes: Optional[str] = None
    recipe: Optional[str] = None
    creator: Optional[str] = None


def format_date(value: Any) -> str:
    if not value:
        return "Unknown date"
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return str(value)
    return parsed.strftime("%Y-%m-%d %H:%M")


def format_seconds(value: Any) -> str:
    try:
        seconds = int(float(value))
    except (TypeError, ValueError):
        return str(value)
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


def _number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def brew_ratio(fields: dict[str, Any]) -> Optional[str]:
    """Stored ratio if present, else drink weight over dose."""
    if fields.get(BrewField.RATIO):
        return str(fields[BrewField.RATIO])
    try:
        dose = float(fields[BrewField.DOSE])
        drink = float(fields[BrewField.DRINK_WEIGHT])
    except (KeyError, TypeError, ValueError):
        return None
    if dose <= 0:
        return None
    return f"1:{drink / dose:.1f}"


def project(record: Record) -> BrewCard:
    f = record.fields
    details: list[tuple[str, str]] = []

    def add(label: str, key: str, fmt=str):
        value = f.get(key)
        if value is None or value == "":
            return
        details.append((label, fmt(value)))

    add("Grinder", BrewField.GRINDER)
    add("Grind Size", BrewField.GRIND_SIZE)
    add("Brewer", BrewField.BREWER)
    add("Total Brew Time", BrewField.TOTAL_BREW_TIME, format_seconds)
    add("Dose", BrewField.DOSE, lambda v: f"{_number(v)}g")
    add("Drink Weight", BrewField.DRINK_WEIGHT, lambda v: f"{_number(v)}g")
    ratio = brew_ratio(f)
    if ratio:
        details.append(("Ratio", ratio))
    add("Number of Pours", BrewField.POURS, _number)
    add("Water Temperature", BrewField.WATER_TEMPERATURE, lambda v: f"{_number(v)}°C")

    rating = f.get(BrewField.ENJOYMENT)
    return BrewCard(
        record_id=record.id,
        coffee_name=coffee_display(f).name,
        date=format_date(f.get(BrewField.BREW_DATE)),
        method=f.get(BrewField.BREW_METHOD) or None,
        details=details,
        rating=f"{rating}/10" if rating is not None else None,
        notes=f.get(BrewField.NOTES) or None,
        recipe=f.get(BrewField.RECIPE) or None,
        creator=f.get(BrewField.CREATED_BY) or None,
    )
