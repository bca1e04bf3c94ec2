from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.schemas.users import UserCreate, UserCreatedOut, UserOut
from app.services.errors import EventServiceError
from app.services.users import create_user, list_users

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserCreatedOut, status_code=status.HTTP_201_CREATED)
def create(payload: UserCreate, db: Session = Depends(get_db)):
    try:
        user_id = create_user(db, name=payload.name, email=payload.email)
    except EventServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"user_id": user_id}


@router.get("", response_model=list[UserOut])
def all_users(db: Session = Depends(get_db)):
    return list_users(db)
