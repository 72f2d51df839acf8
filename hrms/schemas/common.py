"""Response envelopes shared across endpoints."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
    id: int
