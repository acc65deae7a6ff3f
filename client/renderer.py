"""
MODULE OVERVIEW:
The rendering-surface contract the session controller talks to.

WHAT IS HAPPENING HERE:
The controller never owns any UI state. It only calls the four methods of `Renderer`.
Anything that implements them (a terminal dashboard, a test double, a web page bridge)
can sit behind it. `RecordingRenderer` is the in-memory implementation: it keeps a
transcript, the latest status and hints, and the input lock flag, which is all a test
(or a headless script) needs to observe.
"""
from dataclasses import dataclass, field
from typing import Literal, Protocol

Role = Literal["user", "model", "error"]
Severity = Literal["idle", "busy", "ok"]
HintTarget = Literal["login", "chat"]


class MessageHandle(Protocol):
    def append_text(self, text: str) -> None: ...


class Renderer(Protocol):
    def append_message(self, role: Role, text: str) -> MessageHandle: ...

    def set_status(self, severity: Severity, text: str) -> None: ...

    def set_hint(self, target: HintTarget, text: str, is_error: bool = False) -> None: ...

    def lock_input(self, disabled: bool) -> None: ...


@dataclass
class TranscriptEntry:
    role: Role
    text: str

    def append_text(self, text: str) -> None:
        self.text += text


@dataclass
class Hint:
    text: str
    is_error: bool = False


@dataclass
class RecordingRenderer:
    transcript: list[TranscriptEntry] = field(default_factory=list)
    status: tuple[Severity, str] | None = None
    hints: dict[str, Hint] = field(default_factory=dict)
    input_locked: bool = False
    status_history: list[tuple[Severity, str]] = field(default_factory=list)

    def append_message(self, role: Role, text: str) -> TranscriptEntry:
        entry = TranscriptEntry(role, text)
        self.transcript.append(entry)
        return entry

    def set_status(self, severity: Severity, text: str) -> None:
        self.status = (severity, text)
        self.status_history.append(self.status)

    def set_hint(self, target: HintTarget, text: str, is_error: bool = False) -> None:
        self.hints[target] = Hint(text, is_error)

    def lock_input(self, disabled: bool) -> None:
        self.input_locked = disabled
