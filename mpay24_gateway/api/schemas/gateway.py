from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class GatewayConfiguration(BaseModel):
    brandname: str = Field("", max_length=255)
    clientid: str = Field("", max_length=255)
    secret: str = Field("", max_length=255)
    environment: Literal["live", "sandbox"] = "live"
    enabled: bool = False
    model_config = ConfigDict(str_strip_whitespace=True)


class GatewayFormField(BaseModel):
    name: str
    type: Literal["text", "select"]
    label: str
    help: str = ""
    options: Optional[Dict[str, str]] = None


class GatewayFormResponse(BaseModel):
    gateway: str
    fields: List[GatewayFormField]
    supported_currencies: List[str]


class GatewayValidationResponse(BaseModel):
    valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)


class GatewayAccountResponse(BaseModel):
    account_id: int
    brandname: str
    clientid: str
    environment: str
    enabled: bool


class ClientConfigResponse(BaseModel):
    clientid: str
    brandname: str
    cost: float
    currency: str
    rooturl: str
    environment: str
    language: str
    token: str
    tokenizerlocation: str
    tid: str
