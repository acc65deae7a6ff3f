"""
MODULE OVERVIEW:
The exception taxonomy shared by the session controller, the API client and the CLI.

WHAT IS HAPPENING HERE:
Every failure the chat client can run into is a `ChatClientError`. The controller
catches them at the edge of each user action (login submit, message submit) and turns
them into a hint line plus a status update, so none of them ever crash the process.
"""


class ChatClientError(Exception):
    """Base class for every error surfaced by the chat client."""


class InvalidHost(ChatClientError):
    def __init__(self, raw_host: str):
        self.raw_host = raw_host
        super().__init__("Enter a valid service address (http:// or https://).")


class NotAuthenticated(ChatClientError):
    def __init__(self):
        super().__init__("Log in first to obtain a token.")


class LoginRejected(ChatClientError):
    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Login failed ({status_code}): {body or 'unknown error'}")


class LoginTransportError(ChatClientError):
    """The login request never produced a response."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Login request failed: {reason}")


class ChatRejected(ChatClientError):
    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Request failed ({status_code}): {body or 'unknown error'}")


class ChatTransportError(ChatClientError):
    """The chat request or its response stream broke at the network level."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Chat stream interrupted: {reason}")


class StreamAborted(ChatClientError):
    """The server sent an in-band `event: error` frame."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
