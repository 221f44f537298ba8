from pydantic import BaseModel, ConfigDict, Field


class Person(BaseModel):
    """Demo user record, serialized as {"firstName": ..., "lastName": ...}."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    first_name: str = Field(alias="firstName", min_length=1)
    last_name: str = Field(alias="lastName", min_length=1)
