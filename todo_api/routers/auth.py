from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from todo_api.schemas.user import AuthOut, MeOut, UserCreate
from todo_api.models.user import User
from todo_api.utils.auth import hash_password, verify_password, create_token, get_current_user
from todo_api.database import get_db

router = APIRouter(prefix="/api", tags=["auth"])

@router.post("/auth/register", response_model=AuthOut, status_code=201)
def register(user: UserCreate, db: Session = Depends(get_db)):
    exists = db.query(User).filter(User.email == user.email).first()
    if exists:
        raise HTTPException(status_code=409, detail="Email already registered")

    try:
        hashed = hash_password(user.password)
    except ValueError as e:
        # map hashing/validation errors to a 400 so client gets a clear message
        raise HTTPException(status_code=400, detail=str(e))

    new_user = User(email=user.email, password=hashed)
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return {"token": create_token(new_user), "user": new_user}

@router.post("/auth/login", response_model=AuthOut)
def login(user: UserCreate, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == user.email).first()
    if not db_user or not verify_password(user.password, db_user.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return {"token": create_token(db_user), "user": db_user}

@router.get("/me", response_model=MeOut)
def me(current: User = Depends(get_current_user)):
    return {"user": current}
