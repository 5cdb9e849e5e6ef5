from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # snake_case in Python, camelCase on the wire
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class LineItem(CamelModel):
    id: str
    name: str
    amount_cents: int = Field(ge=0, strict=True)  # minor units, never float


class PaymentMethods(CamelModel):
    """Free-text handle or URL per provider. Display only."""
    venmo: Optional[str] = None
    zelle: Optional[str] = None
    paypal: Optional[str] = None
    cashapp: Optional[str] = None
    other: Optional[str] = None


PAYMENT_PROVIDERS = ("venmo", "zelle", "paypal", "cashapp", "other")


class Person(CamelModel):
    id: str
    name: str  # blank-named people are left out of the settlement
    items: List[LineItem] = []
    payments: Optional[PaymentMethods] = None


class AppState(CamelModel):
    people: List[Person]
    currency: Optional[str] = None  # None means the default "$"
    event_name: Optional[str] = None


class Settlement(CamelModel):
    from_: str = Field(alias="from")
    to: str
    amount_cents: int


class PersonBalance(CamelModel):
    name: str
    paid_cents: int
    balance_cents: int


class SettlementSummary(CamelModel):
    total_cents: int
    fair_share_cents: int
    balances: List[PersonBalance]
    settlements: List[Settlement]


# --- API bodies ---

class CreateListRequest(CamelModel):
    data: AppState


class UpdateListRequest(CamelModel):
    data: AppState
    version: int = Field(ge=1, strict=True)


class ListResponse(CamelModel):
    id: str
    data: AppState
    version: int
    created_at: int
    updated_at: int


class ShareRequest(CamelModel):
    state: AppState
    origin: str
    path: str = "/"


class ShareResponse(CamelModel):
    encoded: str
    url: str
    length: int
    exceeds_budget: bool


class ResolvedState(CamelModel):
    mode: str  # "url" or "persisted"
    state: AppState
    list_id: Optional[str] = None
    version: Optional[int] = None
