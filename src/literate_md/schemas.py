from __future__ import annotations

from pydantic import BaseModel


class HealthStatus(BaseModel):
    status: str
    version: str


class LanguageInfo(BaseModel):
    extension: str
    open: str
    close: str
    lang: str


class ConvertRequest(BaseModel):
    filename: str
    text: str


class ConvertResponse(BaseModel):
    filename: str
    lang: str
    markdown: str
