import uuid
from fastapi import APIRouter, Depends, HTTPException
from jose import JWTError
from sqlalchemy.orm import Session
from reservations.db.session import get_db
from reservations.schemas.auth import SignupRequest, LoginRequest, TokenPair, MeOut
from reservations.models.user import User
from reservations.core.security import hash_password, verify_password, create_access_token, create_refresh_token, decode_token
from reservations.api.deps import get_current_user

router = APIRouter(tags=["auth"])

def _tokens(user: User) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(user.id),
        refresh_token=create_refresh_token(user.id),
    )

@router.post("/auth/signup")
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    email = body.email.strip().lower()
    if not email:
        raise HTTPException(status_code=400, detail="email required")
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail="Email already registered")
    u = User(
        id=str(uuid.uuid4()),
        email=email,
        full_name=body.name or "",
        phone=body.phone or "",
        role="customer",
        password_hash=hash_password(body.password),
        is_active=True,
    )
    db.add(u)
    db.commit()
    return {"success": True, "data": _tokens(u)}

@router.post("/auth/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == body.email.strip().lower()).first()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return {"success": True, "data": _tokens(user)}

@router.post("/auth/refresh")
def refresh(refresh_token: str, db: Session = Depends(get_db)):
    try:
        payload = decode_token(refresh_token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    if payload.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    user = db.get(User, payload.get("sub"))
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return {"success": True, "data": _tokens(user)}

@router.get("/auth/me")
def me(me: User = Depends(get_current_user)):
    """Identity of the caller: email, name and role."""
    return {"success": True, "data": MeOut(id=me.id, email=me.email, name=me.full_name or "", phone=me.phone or "", role=me.role)}
