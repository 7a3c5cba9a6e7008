from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Term(BaseModel):
    """
    A glossary term: an immutable name/definition pair.

    The model accepts blank or missing names so that callers can build any
    value they like; storage services reject such terms when they are passed in.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(None, description="Unique name of the term.")
    definition: str = Field("", description="Free-form definition, may be empty.")

    def __init__(self, name: Optional[str] = None, definition: Optional[str] = "", **data):
        super().__init__(name=name, definition=definition, **data)

    @field_validator("definition", mode="before")
    @classmethod
    def empty_definition(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    def has_valid_name(self) -> bool:
        return bool(self.name and self.name.strip())

    def __str__(self) -> str:
        return f"{self.name} - {self.definition}"
