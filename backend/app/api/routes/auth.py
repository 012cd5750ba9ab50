"""
Authentication routes for signup, login, and the user's booked events.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.user import UserCreate, UserLogin, SignupResponse, LoginResponse, UserPublic
from app.schemas.event import EventPage, EventResponse
from app.api.dependencies import get_current_user_id
from app.services import event_service, user_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user and log them in."""
    user, token = user_service.register_user(db, user_data)
    return SignupResponse(
        message="User created successfully. You are now logged in.",
        token=token,
        user=UserPublic.model_validate(user),
    )


@router.post("/login", response_model=LoginResponse)
async def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login with email and password and get a JWT token."""
    user, token = user_service.authenticate_user(db, credentials)
    return LoginResponse(message="Login successful", token=token, userId=user.id)


@router.get("/userevents", response_model=EventPage)
async def get_user_booked_events(
    page: int = Query(1, ge=1),
    limit: int = Query(5, ge=1),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Upcoming events booked by the authenticated user."""
    user_service.get_user(db, user_id)
    events, total = event_service.list_user_upcoming_bookings(db, user_id, page=page, limit=limit)
    return EventPage(
        message="User upcoming events fetched successfully",
        total=total,
        page=page,
        limit=limit,
        events=[EventResponse.model_validate(e) for e in events],
    )
