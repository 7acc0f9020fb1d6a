"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable. Request fields that the
services validate themselves are optional here so that a missing field
produces the service's own error message.
"""

from pydantic import BaseModel
from typing import Optional


class CredentialsIn(BaseModel):
    """Payload for the signup/signin endpoints."""
    email: Optional[str] = None
    password: Optional[str] = None


class SignupOut(BaseModel):
    id: int
    email: str
    needsConfirmation: bool = False


class SigninOut(BaseModel):
    """Signin response containing an access token."""
    id: int
    email: str
    access_token: str


class ScoreIn(BaseModel):
    """A finished typing test submitted by a client."""
    name: Optional[str] = None
    wpm: Optional[float] = None
    accuracy: Optional[float] = None
    difficulty: Optional[str] = None
    mode: Optional[str] = None


class ScoreRankOut(BaseModel):
    id: int
    rank: int


class SuccessOut(BaseModel):
    success: bool = True
