from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_current_user, get_payment_gateway
from app.models.user import User
from app.schemas.payment import PaymentIntentCreate, PaymentConfirm
from app.services import payments
from app.utils.api_response import success_response

router = APIRouter(prefix="/payments", tags=["Payments"])


# =====================================================================
# CREATE PAYMENT INTENT
# =====================================================================
@router.post("/create-intent")
def create_payment_intent(
    data: PaymentIntentCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway=Depends(get_payment_gateway),
):
    result = payments.create_intent(db, gateway, data.booking_id, data.amount, user)
    return success_response("Payment intent created successfully", result)


# =====================================================================
# CONFIRM PAYMENT
# =====================================================================
@router.post("/confirm")
def confirm_payment(
    data: PaymentConfirm,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway=Depends(get_payment_gateway),
):
    result = payments.confirm_intent(db, gateway, data.payment_intent_id, data.booking_id, user)
    return success_response("Payment confirmed successfully", result)
