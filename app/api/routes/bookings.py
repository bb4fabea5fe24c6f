from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_current_user, require_admin
from app.models.booking import Booking
from app.models.enums import BookingStatus
from app.models.user import User
from app.schemas.booking import BookingCreate, BookingOut, BookingUpdate, BookingCancel
from app.services import reservations
from app.services.invoices import generate_invoice
from app.utils.api_response import success_response, dump, pagination

router = APIRouter(prefix="/bookings", tags=["Bookings"])


# ---------------------------------------------------------------------
# CREATE BOOKING
# ---------------------------------------------------------------------
@router.post("", status_code=201)
def create_booking(data: BookingCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    booking = reservations.create_booking(db, user, data)
    return success_response("Booking created successfully", dump(BookingOut, booking))


# ---------------------------------------------------------------------
# USER: MY BOOKINGS
# ---------------------------------------------------------------------
@router.get("/my")
def my_bookings(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    bookings = (
        db.query(Booking)
        .filter(Booking.user_id == user.id)
        .order_by(Booking.created_at.desc())
        .all()
    )

    return success_response("Bookings retrieved successfully", [dump(BookingOut, b) for b in bookings])


# ---------------------------------------------------------------------
# ADMIN: ALL BOOKINGS
# ---------------------------------------------------------------------
@router.get("")
def all_bookings(
    status: Optional[BookingStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(Booking)
    if status is not None:
        query = query.filter(Booking.status == status)

    total = query.count()
    bookings = (
        query.order_by(Booking.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return success_response(
        "Bookings retrieved successfully",
        [dump(BookingOut, b) for b in bookings],
        pagination=pagination(page, limit, total),
    )


# ---------------------------------------------------------------------
# BOOKING DETAILS (owner or admin)
# ---------------------------------------------------------------------
@router.get("/{booking_id}")
def get_booking(booking_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    booking = reservations.get_booking_for(db, booking_id, user)
    return success_response("Booking retrieved successfully", dump(BookingOut, booking))


@router.get("/{booking_id}/invoice")
def booking_invoice(booking_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    booking = reservations.get_booking_for(db, booking_id, user)
    return success_response("Invoice generated successfully", generate_invoice(booking))


# ---------------------------------------------------------------------
# CANCEL BOOKING (owner or admin)
# ---------------------------------------------------------------------
@router.delete("/{booking_id}")
def cancel_booking(
    booking_id: str,
    data: Optional[BookingCancel] = Body(default=None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    booking = reservations.get_booking_for(db, booking_id, user, "cancel")
    booking = reservations.cancel_booking(db, booking, user, reason=data.reason if data else None)

    return success_response("Booking cancelled successfully", dump(BookingOut, booking))


# ---------------------------------------------------------------------
# ADMIN: UPDATE STATUS / PAYMENT STATUS
# ---------------------------------------------------------------------
@router.put("/{booking_id}")
def update_booking(
    booking_id: str,
    data: BookingUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    booking = reservations.get_booking(db, booking_id)
    booking = reservations.update_booking(
        db, booking, admin,
        status=data.status,
        payment_status=data.payment_status,
    )

    return success_response("Booking updated successfully", dump(BookingOut, booking))
