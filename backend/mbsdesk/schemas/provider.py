from typing import Literal

from pydantic import BaseModel, Field

ProviderStatus = Literal["ok", "empty", "error", "rate_limited", "missing_key"]


class ProviderResponse(BaseModel):
    provider: str
    symbol: str
    payload: dict = Field(default_factory=dict)
    status: ProviderStatus = "ok"
