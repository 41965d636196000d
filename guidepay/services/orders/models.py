"""Gateway order shape returned to the browser checkout."""

from pydantic import BaseModel, ConfigDict


class PaymentOrder(BaseModel):
    """Gateway-assigned order; extra gateway fields pass through untouched."""

    model_config = ConfigDict(extra="allow")

    id: str
    amount: int
    currency: str
    receipt: str
