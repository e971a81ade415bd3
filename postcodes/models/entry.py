"""Postal code entry model for GeoNames export rows."""

from enum import IntEnum

from pydantic import BaseModel, ConfigDict


class Field(IntEnum):
    """Column positions of a GeoNames postal code row."""

    COUNTRY_CODE = 0
    POSTAL_CODE = 1
    PLACE_NAME = 2
    ADMIN_NAME1 = 3
    ADMIN_CODE1 = 4
    ADMIN_NAME2 = 5
    ADMIN_CODE2 = 6
    ADMIN_NAME3 = 7
    ADMIN_CODE3 = 8
    LATITUDE = 9
    LONGITUDE = 10
    ACCURACY = 11


ENTRY_FIELDS = tuple(field.name.lower() for field in Field)


class Entry(BaseModel):
    """A single postal code entry.

    Values are kept as text exactly as they appear in the export; a missing
    value is an empty string. Entries can be read by attribute or by position
    with a ``Field`` index (``entry[Field.PLACE_NAME]``).
    """

    model_config = ConfigDict(frozen=True)

    country_code: str = ""
    postal_code: str = ""
    place_name: str = ""
    admin_name1: str = ""
    admin_code1: str = ""
    admin_name2: str = ""
    admin_code2: str = ""
    admin_name3: str = ""
    admin_code3: str = ""
    latitude: str = ""
    longitude: str = ""
    accuracy: str = ""

    def __getitem__(self, field: int) -> str:
        return getattr(self, ENTRY_FIELDS[field])

    @classmethod
    def from_row(cls, columns: list[str]) -> "Entry":
        """Create an Entry by copying row columns into the fixed slots.

        Args:
            columns: Parsed row values in export column order.

        Returns:
            An Entry; short rows leave trailing fields empty and columns
            beyond the last field are ignored.
        """
        return cls(**dict(zip(ENTRY_FIELDS, columns)))

    def to_row(self) -> list[str]:
        """Return the field values in export column order."""
        return [getattr(self, name) for name in ENTRY_FIELDS]


class FetchResult(BaseModel):
    """Outcome of a conditional country fetch."""

    entries: list[Entry]
    modified: bool
    etag: str
