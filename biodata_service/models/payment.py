from pydantic import BaseModel, ConfigDict, Field


class PaymentIntentRequest(BaseModel):
    amount: float = Field(gt=0)


class PaymentIntentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_secret: str = Field(alias="clientSecret")


__all__ = ["PaymentIntentRequest", "PaymentIntentResponse"]
