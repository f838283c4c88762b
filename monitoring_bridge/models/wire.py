from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator


class ProviderModel(BaseModel):
    """Base for records decoded from state provider payloads.

    The provider speaks PascalCase (``IsRunning``, ``NumRuns``); fields
    are declared snake_case with the wire name as alias.  A missing key
    and an explicit ``null`` both decode to the field default.  Keys we
    do not model are kept so the JSON endpoints re-emit them unchanged.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def _null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name is not None:
            field = cls.model_fields[info.field_name]
            return field.get_default(call_default_factory=True)
        return value

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
