"""Request and response bodies of the HTTP API."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field


T = TypeVar("T")


class DataMap(BaseModel, Generic[T]):
    """Envelope with a single ``data`` field, used for requests and responses."""
    data: T


class TablesResponse(BaseModel):
    tables: list[str]


class InterfaceModel(BaseModel):
    """Snapshot of one host network interface."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    description: str
    mac: str
    ips: list[str]
    up: bool
    loopback: bool
    running: bool


class InsertRuleCommand(BaseModel):
    """Body of POST /{table}/{chain}."""
    position: int = Field(ge=0, description="0-based position the rule will occupy")
    rule: str


class ErrorModel(BaseModel):
    kind: str
    message: str
    hint: Optional[str] = None
    details: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: ErrorModel
