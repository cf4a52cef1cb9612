"""Shared response models for endpoints that return simple JSON dicts."""

from pydantic import BaseModel


class StatusResponse(BaseModel):
    status: str


class DownloadLink(BaseModel):
    url: str


class ErrorResponse(BaseModel):
    error: str
    retryable: bool = False
