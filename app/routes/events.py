from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.schemas.events import EventCreate, EventCreatedOut, EventDetailsOut, EventOut, EventStatsOut
from app.schemas.registrations import MessageOut, RegistrationRequest
from app.services.errors import EventServiceError
from app.services.events import create_event, get_event_details, list_upcoming_events
from app.services.registrations import cancel_registration, get_event_stats, register_for_event

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post("", response_model=EventCreatedOut, status_code=status.HTTP_201_CREATED)
def create(payload: EventCreate, db: Session = Depends(get_db)):
    try:
        event_id = create_event(
            db,
            title=payload.title,
            event_date=payload.event_date,
            location=payload.location,
            capacity=payload.capacity,
        )
    except EventServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"event_id": event_id}


@router.get("", response_model=list[EventOut])
def upcoming(db: Session = Depends(get_db)):
    return list_upcoming_events(db)


@router.post("/register", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegistrationRequest, db: Session = Depends(get_db)):
    try:
        register_for_event(db, event_id=payload.event_id, user_id=payload.user_id)
    except EventServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"message": "Registered successfully"}


@router.post("/cancel", response_model=MessageOut)
def cancel(payload: RegistrationRequest, db: Session = Depends(get_db)):
    try:
        cancel_registration(db, event_id=payload.event_id, user_id=payload.user_id)
    except EventServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"message": "Registration cancelled successfully"}


@router.get("/{event_id}", response_model=EventDetailsOut)
def details(event_id: int, db: Session = Depends(get_db)):
    try:
        return get_event_details(db, event_id)
    except EventServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{event_id}/stats", response_model=EventStatsOut)
def event_stats(event_id: int, db: Session = Depends(get_db)):
    try:
        return get_event_stats(db, event_id)
    except EventServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
