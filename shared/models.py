"""
MODULE OVERVIEW:
This module defines the request/response bodies exchanged between the chat client
and the chat service, powered by Pydantic v2.

WHAT IS HAPPENING HERE:
The client builds its JSON bodies from these models and validates the login reply
against `LoginResponse`. The demo server uses the very same models for its routes,
so both sides share one contract, like a monorepo sharing type definitions.
"""
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str
    password: str


# A 2xx login without a usable token is still a failed login.
class LoginResponse(BaseModel):
    token: str = Field(min_length=1)


class ChatRequest(BaseModel):
    message: str
