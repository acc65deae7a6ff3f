"""
CLI entrypoint for the Stream Chat client and its demo server.
"""
import asyncio
import sys

import typer
from loguru import logger
from rich.console import Console

from client.controller import SessionController
from client.session import SessionStatus
from client.visualizer import ConsoleRenderer
from shared.config import settings

app = typer.Typer(help="Stream Chat CLI Manager")

QUIT_COMMANDS = {"/quit", "/exit"}


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


@app.callback()
def main(log_level: str = typer.Option(settings.LOG_LEVEL, help="Log level for stderr output")):
    configure_logging(log_level)


@app.command()
def server(port: int = typer.Option(settings.PORT, help="Port to listen on")):
    """Start the demo chat server using Uvicorn."""
    import uvicorn
    typer.echo(f"Starting server on port {port}...")
    uvicorn.run("server.main:app", host="0.0.0.0", port=port, log_level=settings.LOG_LEVEL.lower())


async def _login_until_ready(controller: SessionController, host: str) -> bool:
    while controller.session.status != SessionStatus.AUTHENTICATED:
        try:
            username = typer.prompt("username", default=settings.DEMO_USERNAME)
            password = typer.prompt("password", hide_input=True)
        except typer.Abort:
            return False
        ok = await controller.submit_login(username, password, host=host)
        if not ok and not typer.confirm("Try again?", default=True):
            return False
    return True


async def _chat_loop(host: str) -> None:
    console = Console()
    controller = SessionController(ConsoleRenderer(console), default_host=settings.CHAT_HOST)
    try:
        if not await _login_until_ready(controller, host):
            return
        while True:
            try:
                text = console.input("[bold]> [/bold]")
            except (EOFError, KeyboardInterrupt):
                console.print()
                return
            if text.strip() in QUIT_COMMANDS:
                return
            await controller.submit_message(text)
            if controller.session.status == SessionStatus.EXPIRED:
                if not await _login_until_ready(controller, host):
                    return
    finally:
        await controller.aclose()


@app.command()
def chat(host: str = typer.Option("", help="Service address; blank uses CHAT_HOST")):
    """Log in and chat interactively, rendering replies as they stream in."""
    try:
        asyncio.run(_chat_loop(host))
    except KeyboardInterrupt:
        pass


@app.command()
def health(host: str = typer.Option(settings.CHAT_HOST, help="Service address")):
    """Query the server's liveness endpoint."""
    import httpx
    resp = httpx.get(f"{host.rstrip('/')}/healthz")
    typer.echo(resp.json())


if __name__ == "__main__":
    app()
