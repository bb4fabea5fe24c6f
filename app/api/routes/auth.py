from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_current_user
from app.core.jwt import create_access_token
from app.core.security import hash_password, verify_password
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.user import UserCreate, UserLogin, UserOut
from app.utils.api_response import success_response, dump

router = APIRouter(prefix="/auth", tags=["Authentication"])


# =====================================================================
#                           REGISTER (customers)
# =====================================================================
@router.post("/register", status_code=201)
def register(data: UserCreate, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == data.email).first():
        raise HTTPException(status_code=400, detail="User already exists")

    user = User(
        name=data.name,
        email=data.email,
        phone=data.phone,
        password_hash=hash_password(data.password),
        role=UserRole.CUSTOMER,
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    return success_response("User registered successfully", dump(UserOut, user))


# =====================================================================
#                           LOGIN
# =====================================================================
@router.post("/login")
def login(data: UserLogin, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == data.email).first()

    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": user.email, "role": user.role.value})

    return success_response("Login successful", {
        "accessToken": token,
        "tokenType": "bearer",
        "user": dump(UserOut, user),
    })


# =====================================================================
#                           CURRENT USER
# =====================================================================
@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return success_response("User retrieved successfully", dump(UserOut, user))
