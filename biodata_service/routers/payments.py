from fastapi import APIRouter, Depends

from ..integrations.identity import VerifiedIdentity
from ..integrations.payments import PaymentGateway, get_payment_gateway
from ..models.payment import PaymentIntentRequest, PaymentIntentResponse
from .deps import require_identity

router = APIRouter(tags=["payments"])


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    payload: PaymentIntentRequest,
    _identity: VerifiedIdentity = Depends(require_identity),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    client_secret = await gateway.create_intent(payload.amount)
    return PaymentIntentResponse(clientSecret=client_secret)


__all__ = ["router"]
