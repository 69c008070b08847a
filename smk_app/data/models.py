"""
Normalized record types for the SMK collection.

Records are immutable once produced by the normalizer. from_dict rebuilds
them from the plain structures the cache stores.
"""

from dataclasses import dataclass
from typing import Any, Optional


class Gender:
    """Canonical gender labels."""
    MALE = "Male"
    FEMALE = "Female"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class DepictedPerson:
    """Person depicted in an artwork."""
    name: str
    gender: str
    nationality: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DepictedPerson":
        return cls(
            name=data["name"],
            gender=data["gender"],
            nationality=data.get("nationality"),
        )


@dataclass(frozen=True)
class Artwork:
    """Normalized artwork record."""
    gender: str
    nationality: str
    object_type: str
    acquisition_year: int
    techniques: tuple[str, ...] = ()
    materials: tuple[str, ...] = ()
    production_year: Optional[int] = None
    exhibitions: int = 0
    on_display: bool = False
    credit_line: str = "Unknown"
    depicted_persons: tuple[DepictedPerson, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Artwork":
        """Rebuild an Artwork from its serialized form."""
        return cls(
            gender=data["gender"],
            nationality=data["nationality"],
            object_type=data["object_type"],
            acquisition_year=data["acquisition_year"],
            techniques=tuple(data.get("techniques", ())),
            materials=tuple(data.get("materials", ())),
            production_year=data.get("production_year"),
            exhibitions=data.get("exhibitions", 0),
            on_display=data.get("on_display", False),
            credit_line=data.get("credit_line", "Unknown"),
            depicted_persons=tuple(
                DepictedPerson.from_dict(p) for p in data.get("depicted_persons", ())
            ),
        )
