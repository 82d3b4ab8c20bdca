"""Pydantic models for push notifications."""

from __future__ import annotations

from pydantic import BaseModel


class ExpoMessage(BaseModel):
    """One push message for the Expo push gateway."""

    to: str
    sound: str | None = "default"
    title: str | None = None
    body: str | None = None
    data: dict[str, str] = {}


class ExpoPushTicket(BaseModel):
    status: str  # "ok" or "error"
    id: str | None = None
    message: str | None = None
    details: dict | None = None
