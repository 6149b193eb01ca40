"""Pydantic schemas for the auth gateway endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class CredentialsRequest(BaseModel):
    """Body of sign-in and sign-up."""

    model_config = ConfigDict(extra="ignore")

    email: str | None = Field(None, description="Login email")
    password: str | None = Field(None, description="Plaintext password")


class ValidateSessionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    session_id: str | None = Field(None, alias="sessionId", description="Session id to validate")


class AuthResponse(BaseModel):
    """Gateway result. Failures carry only ``status``."""

    user: str | None = Field(None, description="Display name of the user")
    session: str | None = Field(None, description="Current (possibly renewed) session id")
    status: int = Field(..., description="200 on success, 404 on any failure")
