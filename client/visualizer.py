"""
MODULE OVERVIEW:
The Rich terminal rendering surface for the interactive chat.

WHAT IS HAPPENING HERE:
`ConsoleRenderer` implements the `Renderer` contract on top of a Rich console.
Each transcript message gets a coloured role label. Model replies are printed
fragment by fragment as they stream in, so the user watches the answer being typed.
Status and hint lines are printed only when they change, to keep the terminal calm.
"""
from rich.console import Console
from rich.text import Text

from client.renderer import HintTarget, Role, Severity

ROLE_LABELS = {
    "user": ("you", "cyan"),
    "model": ("model", "green"),
    "error": ("error", "red"),
}

SEVERITY_STYLES = {
    "ok": "green",
    "busy": "yellow",
    "idle": "red",
}


class ConsoleBubble:
    def __init__(self, console: Console):
        self.console = console
        self.written = False

    def append_text(self, text: str) -> None:
        if text:
            self.written = True
        self.console.print(text, end="", markup=False, highlight=False, soft_wrap=True)


class ConsoleRenderer:
    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self.status: tuple[Severity, str] | None = None
        self.input_locked = False
        self._open_bubble: ConsoleBubble | None = None

    def _close_bubble(self) -> None:
        # Streamed replies are printed without newlines; terminate the line once
        if self._open_bubble is not None:
            self.console.print()
            self._open_bubble = None

    def append_message(self, role: Role, text: str) -> ConsoleBubble:
        self._close_bubble()
        label, color = ROLE_LABELS.get(role, (role, "white"))
        self.console.print(Text(f"{label}> ", style=f"bold {color}"), end="")
        bubble = ConsoleBubble(self.console)
        bubble.append_text(text)
        self._open_bubble = bubble
        return bubble

    def set_status(self, severity: Severity, text: str) -> None:
        if self.status == (severity, text):
            return
        self.status = (severity, text)
        self._close_bubble()
        color = SEVERITY_STYLES.get(severity, "white")
        self.console.print(Text(f"[{text}]", style=f"bold {color}"))

    def set_hint(self, target: HintTarget, text: str, is_error: bool = False) -> None:
        self._close_bubble()
        style = "red" if is_error else "dim"
        self.console.print(Text(f"({target}) {text}", style=style))

    def lock_input(self, disabled: bool) -> None:
        self.input_locked = disabled
