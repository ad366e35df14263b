"""Data Transfer Objects — Pydantic models for API boundaries."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    code: str
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    environment: str = "development"
    credentials: int = 0


class GenerateRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=100_000)
    clean_json: bool = False


class GenerateResponse(BaseModel):
    text: str


class CredentialStatsResponse(BaseModel):
    preview: str
    uses: int
    failures: int


class PoolStatsResponse(BaseModel):
    totalCredentials: int
    perCredential: list[CredentialStatsResponse]
