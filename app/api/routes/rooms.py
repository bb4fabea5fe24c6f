from datetime import date

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, require_admin
from app.core.exceptions import ConflictError
from app.core.logging_config import get_logger
from app.core.redis import get_cache, set_cache, delete_cache, room_cache_key
from app.models.room import Room
from app.models.user import User
from app.schemas.room import RoomCreate, RoomUpdate, RoomOut
from app.services.reservations import quote, with_room_lock
from app.utils.api_response import success_response, dump, pagination

router = APIRouter(prefix="/rooms", tags=["Rooms"])
logger = get_logger().bind(log_type="admin")


def get_room_or_404(db: Session, room_id: int) -> Room:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    return room


# =====================================================================
# CREATE ROOM  (Admin Only)
# =====================================================================
@router.post("", status_code=201)
def create_room(data: RoomCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    room = Room(**data.model_dump(), booked_dates=[])

    db.add(room)
    db.commit()
    db.refresh(room)

    logger.info(f"Room Created | Room={room.id} | By={admin.email}")

    return success_response("Room created successfully", dump(RoomOut, room))


# =====================================================================
# EDIT ROOM  (Admin Only)
# =====================================================================
@router.put("/{room_id}")
def update_room(
    room_id: int,
    data: RoomUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    changes = data.model_dump(exclude_unset=True)

    # Existing bookings keep their frozen price and room snapshot
    def apply(room: Room) -> Room:
        for field, value in changes.items():
            setattr(room, field, value)
        return room

    room = with_room_lock(db, room_id, apply)
    db.refresh(room)
    delete_cache(room_cache_key(room.id))

    logger.info(f"Room Updated | Room={room.id} | By={admin.email}")

    return success_response("Room updated successfully", dump(RoomOut, room))


# =====================================================================
# DELETE ROOM  (Admin Only)
# =====================================================================
@router.delete("/{room_id}")
def delete_room(room_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):

    # Cancelled bookings stay behind with room_id NULL and their room snapshot
    def remove(room: Room):
        if len(room.interval_store()):
            raise ConflictError("Cannot delete room with reserved dates. Cancel its bookings first.")
        db.delete(room)

    with_room_lock(db, room_id, remove)
    delete_cache(room_cache_key(room_id))

    logger.info(f"Room Deleted | Room={room_id} | By={admin.email}")

    return success_response("Room deleted successfully")


# =====================================================================
# LIST ROOMS (Public)
# =====================================================================
@router.get("")
def list_rooms(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    featured: Optional[bool] = None,
    available: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Room)
    if featured is not None:
        query = query.filter(Room.featured == featured)
    if available is not None:
        query = query.filter(Room.available == available)

    total = query.count()

    rooms = (
        query.order_by(Room.created_at.desc(), Room.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return success_response(
        "Rooms retrieved successfully",
        [dump(RoomOut, r) for r in rooms],
        pagination=pagination(page, limit, total),
    )


# =====================================================================
# ROOM DETAILS (Public, cached)
# =====================================================================
@router.get("/{room_id}")
def get_room(room_id: int, db: Session = Depends(get_db)):
    key = room_cache_key(room_id)

    cached = get_cache(key)
    if cached is not None:
        return success_response("Room retrieved successfully", cached)

    data = dump(RoomOut, get_room_or_404(db, room_id))
    set_cache(key, data)

    return success_response("Room retrieved successfully", data)


# =====================================================================
# AVAILABILITY + PRICE QUOTE (Public)
# =====================================================================
@router.get("/{room_id}/availability")
def room_availability(
    room_id: int,
    check_in: date = Query(..., alias="checkIn"),
    check_out: date = Query(..., alias="checkOut"),
    db: Session = Depends(get_db),
):
    room = get_room_or_404(db, room_id)

    return success_response("Availability checked successfully", quote(room, check_in, check_out))

