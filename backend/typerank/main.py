"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the typerank backend.
Controllers are intentionally thin: they accept requests, delegate to
services, and return JSON responses. Every error is rendered as
``{"error": message}``.

Endpoints implemented:
- GET /health
- POST /auth/signup
- POST /auth/signin
- GET /paragraphs
- GET /leaderboard
- POST /scores
- GET /user-progress
- GET /user-progress/summary
- GET /daily-challenge
- GET /admin/scores
- DELETE /admin/scores/{score_id}
- POST /admin/reset
"""

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import json
import logging
import os
import time
import uuid
from .database import create_db_and_tables, get_session
from . import services, models
from .auth import get_optional_user, require_admin
from .config import settings
from .errors import RateLimitError, TyperankError
from .paragraphs import challenge_day, practice_paragraph
from .schemas import CredentialsIn, ScoreIn, ScoreRankOut, SigninOut, SignupOut, SuccessOut
from .utils.rate_limit import InMemoryRateLimiter

app = FastAPI(title="Typerank API")
logger = logging.getLogger("typerank.api")
if not logger.handlers:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
_auth_rate_limiter = InMemoryRateLimiter()

# Wide-open CORS keeps a locally served front end working without extra config in dev.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


def _log_payload(request: Request, req_id: str, started: float, status_code: Optional[int] = None) -> str:
    payload = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
        "client": request.client.host if request.client else "unknown",
    }
    if status_code is not None:
        payload["status_code"] = status_code
    return json.dumps(payload, ensure_ascii=True)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request_failed %s", _log_payload(request, req_id, started))
        raise
    response.headers["X-Request-ID"] = req_id
    logger.info("request_done %s", _log_payload(request, req_id, started, response.status_code))
    return response


@app.exception_handler(TyperankError)
async def typerank_error_handler(request: Request, exc: TyperankError):
    headers = None
    if isinstance(exc, RateLimitError):
        headers = {"Retry-After": str(exc.retry_after)}
    if exc.status_code >= 500:
        logger.error("server_error path=%s error=%s", request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": "Internal server error"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # malformed bodies and wrongly typed fields are client errors, not 422s
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": f"invalid request: {problems}"})


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("store_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("unexpected_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def _enforce_auth_rate_limit(request: Request) -> None:
    key = f"{request.client.host if request.client else 'unknown'}:{request.url.path}"
    _auth_rate_limiter.check(key, settings.AUTH_RATE_LIMIT_PER_MIN, settings.AUTH_RATE_LIMIT_WINDOW_SECONDS)


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


@app.post('/auth/signup', response_model=SignupOut)
def signup(payload: CredentialsIn, request: Request, db: Session = Depends(get_session)):
    """Create a local account.

    Accounts are active immediately, so `needsConfirmation` is always false.
    """
    _enforce_auth_rate_limit(request)
    user = services.AuthService(db).signup(payload.email, payload.password)
    return {'id': user.id, 'email': user.email, 'needsConfirmation': False}


@app.post('/auth/signin', response_model=SigninOut)
def signin(payload: CredentialsIn, request: Request, db: Session = Depends(get_session)):
    """Authenticate a user and return a short-lived JWT token.

    The token contains `user_id` and `email` and is signed with the
    configured JWT secret.
    """
    _enforce_auth_rate_limit(request)
    auth = services.AuthService(db)
    user = auth.signin(payload.email, payload.password)
    return {'id': user.id, 'email': user.email, 'access_token': auth.issue_token(user)}


@app.get('/paragraphs')
def get_practice_paragraph(difficulty: str = 'easy'):
    """Return a random practice paragraph for `difficulty`."""
    return {'difficulty': difficulty, 'paragraph': practice_paragraph(difficulty)}


@app.get('/leaderboard')
def leaderboard(difficulty: Optional[str] = None, db: Session = Depends(get_session)):
    """Return the ten fastest scores; `difficulty=all` or no value means every tier."""
    return [services.score_to_dict(s) for s in services.ScoreService(db).top(difficulty)]


@app.post('/scores', response_model=ScoreRankOut)
def submit_score(
    payload: ScoreIn,
    db: Session = Depends(get_session),
    user: Optional[models.User] = Depends(get_optional_user),
):
    """Store a finished test and return its id and current rank.

    Signed-in users may omit `name`; their email is used instead.
    """
    data = payload.model_dump()
    if user is not None and not data.get('name'):
        data['name'] = user.email
    return services.ScoreService(db).record(data)


@app.get('/user-progress')
def user_progress(name: Optional[str] = None, db: Session = Depends(get_session)):
    """Return every test by `name` as `{wpm, accuracy, date}`, oldest first."""
    return services.ScoreService(db).history_of(name)


@app.get('/user-progress/summary')
def user_progress_summary(name: Optional[str] = None, db: Session = Depends(get_session)):
    """Return test count, average wpm and best accuracy for `name`."""
    svc = services.ScoreService(db)
    return svc.summary(svc.history_of(name))


@app.get('/daily-challenge')
def daily_challenge(db: Session = Depends(get_session)):
    """Return today's shared paragraph, creating it on the first request of the day."""
    day = challenge_day()
    paragraph = services.DailyChallengeService(db).get_paragraph(day)
    return {'date': day.isoformat(), 'paragraph': paragraph}


@app.get('/admin/scores')
def admin_list_scores(db: Session = Depends(get_session), admin: models.User = Depends(require_admin)):
    """List every stored score, newest first."""
    return [services.score_to_dict(s) for s in services.AdminService(db).list_all()]


@app.delete('/admin/scores/{score_id}', response_model=SuccessOut)
def admin_delete_score(score_id: int, db: Session = Depends(get_session), admin: models.User = Depends(require_admin)):
    """Delete one score. Unknown ids succeed without changes."""
    services.AdminService(db).delete_one(score_id)
    return {'success': True}


@app.post('/admin/reset', response_model=SuccessOut)
def admin_reset(db: Session = Depends(get_session), admin: models.User = Depends(require_admin)):
    """Delete every score."""
    services.AdminService(db).delete_all()
    return {'success': True}
