"""FastAPI web application for sincewhen.

Thin HTTP glue over the repositories and the format registry. Endpoints are
plain `def` functions so database work runs in FastAPI's threadpool.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional
from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from sincewhen import __version__
from sincewhen.api.auth_models import AuthResponse, GoogleLoginRequest
from sincewhen.auth.dependencies import get_current_user
from sincewhen.auth.google_oauth import verify_google_token
from sincewhen.auth.jwt import create_access_token
from sincewhen.database.database import get_db, init_db
from sincewhen.database.group_repository import GroupRepository
from sincewhen.database.timer_repository import TimerRepository
from sincewhen.database.user_repository import UserRepository
from sincewhen.engine.formatters import format_time, list_formatters
from sincewhen.errors import ExhaustionError, StorageError, ValidationError
from sincewhen.models.timer import Timer
from sincewhen.models.user import User

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="sincewhen API",
    description="Timers that count the time since something last happened",
    version=__version__,
    lifespan=lifespan,
)


# Request models
class TitleRequest(BaseModel):
    """Request body carrying a timer or group title."""
    title: str = Field(..., description="Title")


class FormatRequest(BaseModel):
    """Request body selecting a display format."""
    format: int = Field(..., description="Index into GET /formats")


class ResetRequest(BaseModel):
    """Request body for resetting a timer."""
    secret: str = Field(..., description="The timer's reset secret")


# Response models
class TimerView(BaseModel):
    """A timer as shown publicly (no secret)."""
    title: str
    slug: str
    epoch: int
    format: int
    display: str


class OwnedTimerView(TimerView):
    """A timer as shown to its owner."""
    secret: str


class GroupView(BaseModel):
    """A group with its rendered member timers."""
    title: str
    slug: str
    timers: List[TimerView]


class SlugResponse(BaseModel):
    """Response for created entities."""
    slug: str


def _view(timer: Timer, now: float, owned: bool = False) -> TimerView:
    fields = {
        "title": timer.title,
        "slug": timer.slug,
        "epoch": timer.epoch,
        "format": timer.format,
        "display": format_time(timer.epoch, timer.format, now),
    }
    if owned:
        return OwnedTimerView(secret=timer.secret, **fields)
    return TimerView(**fields)


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ExhaustionError)
async def exhaustion_error_handler(request: Request, exc: ExhaustionError):
    logger.error(f"Slug allocation failed on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": "Could not allocate identifier"})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal storage error"})


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/formats")
def formats():
    """Names of the display formats, in index order."""
    return {"formats": list_formatters()}


@app.post("/auth/google/callback", response_model=AuthResponse)
def google_login(body: GoogleLoginRequest, db: Session = Depends(get_db)):
    """Exchange a verified Google ID token for a sincewhen access token."""
    email = verify_google_token(body.id_token)
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Google token")
    user = UserRepository(db).get_or_create(email)
    logger.info(f"User {user.id} logged in")
    return AuthResponse(access_token=create_access_token(user.id), user=user)


@app.get("/me", response_model=User)
def me(user: User = Depends(get_current_user)):
    """The logged-in user."""
    return user


@app.get("/timers", response_model=List[OwnedTimerView])
def list_timers(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """The current user's timers, oldest first."""
    now = time.time()
    return [_view(t, now, owned=True) for t in TimerRepository(db).get_for_user(user.id)]


@app.post("/timers", response_model=SlugResponse, status_code=status.HTTP_201_CREATED)
def create_timer(body: TitleRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Create a timer starting now."""
    return SlugResponse(slug=TimerRepository(db).create(user.id, body.title))


@app.delete("/timers/{slug}", status_code=status.HTTP_204_NO_CONTENT)
def delete_timer(slug: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete one of the current user's timers."""
    if not TimerRepository(db).delete(user.id, slug):
        raise _not_found("Timer")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.put("/timers/{slug}/format", response_model=OwnedTimerView)
def set_timer_format(
    slug: str,
    body: FormatRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change how one of the current user's timers is displayed."""
    repo = TimerRepository(db)
    if not repo.set_format(user.id, slug, body.format):
        raise _not_found("Timer")
    timer = repo.get_by_slug(slug)
    if timer is None:
        raise _not_found("Timer")
    return _view(timer, time.time(), owned=True)


@app.post("/timers/{slug}/reset", response_model=TimerView)
def reset_timer(slug: str, body: ResetRequest, db: Session = Depends(get_db)):
    """Reset a timer to now. Needs the timer's secret, not a login."""
    repo = TimerRepository(db)
    if not repo.reset(slug, body.secret):
        raise _not_found("Timer")
    timer = repo.get_by_slug(slug)
    if timer is None:
        raise _not_found("Timer")
    return _view(timer, time.time())


@app.get("/groups", response_model=List[GroupView])
def list_groups(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """The current user's groups with their timers."""
    now = time.time()
    return [
        GroupView(title=g.title, slug=g.slug, timers=[_view(t, now) for t in g.timers])
        for g in GroupRepository(db).get_for_user(user.id)
    ]


@app.post("/groups", response_model=SlugResponse, status_code=status.HTTP_201_CREATED)
def create_group(body: TitleRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Create an empty group."""
    return SlugResponse(slug=GroupRepository(db).create(user.id, body.title))


@app.delete("/groups/{slug}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(slug: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete one of the current user's groups; its timers are kept."""
    if not GroupRepository(db).delete(user.id, slug):
        raise _not_found("Group")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _membership_ids(db: Session, group_slug: str, timer_slug: str):
    group = GroupRepository(db).get_by_slug(group_slug)
    timer: Optional[Timer] = TimerRepository(db).get_by_slug(timer_slug)
    if group is None or timer is None:
        raise _not_found("Group or timer")
    return group.id, timer.id


@app.put("/groups/{group_slug}/timers/{timer_slug}", status_code=status.HTTP_204_NO_CONTENT)
def add_group_timer(
    group_slug: str,
    timer_slug: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Add a timer to one of the current user's groups."""
    group_id, timer_id = _membership_ids(db, group_slug, timer_slug)
    if not GroupRepository(db).add_timer(user.id, group_id, timer_id):
        raise _not_found("Group")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.delete("/groups/{group_slug}/timers/{timer_slug}", status_code=status.HTTP_204_NO_CONTENT)
def remove_group_timer(
    group_slug: str,
    timer_slug: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Remove a timer from one of the current user's groups."""
    group_id, timer_id = _membership_ids(db, group_slug, timer_slug)
    if not GroupRepository(db).remove_timer(user.id, group_id, timer_id):
        raise _not_found("Membership")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/s/{slug}", response_model=List[TimerView])
def view_slug(slug: str, db: Session = Depends(get_db)):
    """Public view of a group, a timer or a user's timers."""
    timers = TimerRepository(db).get_by_any_slug(slug)
    if not timers:
        raise _not_found("Slug")
    now = time.time()
    return [_view(t, now) for t in timers]
