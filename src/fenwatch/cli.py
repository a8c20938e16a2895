"""Command-line interface for fenwatch."""

import asyncio
import json
import sys
from pathlib import Path
from typing import TextIO

import typer
from rich.console import Console
from rich.table import Table

from fenwatch import __version__
from fenwatch.core.configs import AppConfig, load_app_config
from fenwatch.core.position import normalize
from fenwatch.engine import AutoMover, EngineDriver, UCIEngine
from fenwatch.feed import ChannelTap, FeedHandler, GameSession, MoveSender
from fenwatch.utils import setup_logging
from fenwatch.watch import FEN_PUSH, AsyncioScheduler, EmissionSink, FileSource, SourceWatcher

app = typer.Typer(
    name="fenwatch",
    help="fenwatch: settled position snapshots from live chess boards",
    add_completion=False,
)
console = Console()


class ConsoleChannel:
    """Outbound channel that prints what would be sent to the remote side."""

    def __init__(self) -> None:
        self.is_open = True

    def send(self, data: str) -> None:
        console.print(f"[bold magenta]send[/bold magenta] {data}")

    def close(self) -> None:
        self.is_open = False


def _load(config: Path | None, overrides: list[str] | None) -> AppConfig:
    cfg = load_app_config(config, overrides)
    setup_logging(cfg.log_level, cfg.log_file)
    return cfg


def _print_emission(raw: str) -> None:
    console.print(f"[bold green]{FEN_PUSH}[/bold green] {raw}")


@app.command()
def version() -> None:
    """Print version information."""
    console.print(f"[bold blue]fenwatch[/bold blue] v{__version__}")


@app.command("normalize")
def normalize_cmd(
    fen: str = typer.Argument(..., help="Position string, 1 to 6 fields"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Show the six normalized fields of a position string."""
    position = normalize(fen)
    if position is None:
        console.print("[red]Empty position string[/red]")
        raise typer.Exit(code=1)

    names = ("placement", "active", "castling", "en_passant", "halfmove", "fullmove")
    if as_json:
        console.print_json(json.dumps(dict(zip(names, position.fields))))
        return

    table = Table(title=position.raw)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for name, value in zip(names, position.fields):
        table.add_row(name, value)
    console.print(table)


async def _run_watch(path: Path, cfg: AppConfig, duration: float | None) -> None:
    sink = EmissionSink()
    sink.subscribe(_print_emission)
    watcher = SourceWatcher(FileSource(path), sink, AsyncioScheduler(), cfg.watcher, cfg.stabilizer)
    watcher.start()
    try:
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)
    finally:
        watcher.stop()


@app.command()
def watch(
    path: Path = typer.Argument(..., help="Text file holding the current position"),
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    overrides: list[str] | None = typer.Option(None, "--override", "-o", help="Config override, e.g. stabilizer.max_wait=2.0"),
    duration: float | None = typer.Option(None, "--duration", help="Stop after this many seconds"),
) -> None:
    """Watch a position file and print each settled change."""
    cfg = _load(config, overrides)
    console.print(f"[bold cyan]Watching[/bold cyan] {path}")
    try:
        asyncio.run(_run_watch(path, cfg, duration))
    except KeyboardInterrupt:
        console.print("[dim]Stopped[/dim]")


async def _run_feed(stream: TextIO, cfg: AppConfig) -> None:
    sink = EmissionSink()
    sink.subscribe(_print_emission)
    session = GameSession()
    tap = ChannelTap(ConsoleChannel)

    engine: UCIEngine | None = None
    on_turn = on_game_end = None
    if cfg.engine.binary_path:
        engine = UCIEngine(
            cfg.engine.binary_path,
            options=cfg.engine.uci_options(),
            timeout=cfg.engine.timeout,
        )
        driver = EngineDriver(engine, cfg.engine.depth, cfg.engine.movetime_ms)
        mover = AutoMover(driver, MoveSender(tap), session)
        on_turn, on_game_end = mover.on_turn, mover.on_game_end

    handler = FeedHandler(sink, session, cfg.feed, on_turn, on_game_end)
    tap.inbound_hooks.append(handler.handle_message)
    channel = tap.open()

    loop = asyncio.get_running_loop()
    try:
        while True:
            line = await loop.run_in_executor(None, stream.readline)
            if not line:
                break
            line = line.strip()
            if line:
                channel.deliver(line)
        await handler.drain()
    finally:
        channel.close()
        if engine is not None:
            engine.close()


@app.command()
def feed(
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    overrides: list[str] | None = typer.Option(None, "--override", "-o", help="Config override"),
    engine: Path | None = typer.Option(None, "--engine", "-e", help="Path to a UCI engine binary"),
    automove: bool = typer.Option(False, "--automove", help="Play the engine's move on our turn"),
) -> None:
    """Read feed messages (one JSON object per line) from stdin."""
    extra = list(overrides or [])
    if engine is not None:
        extra.append(f"engine.binary_path={engine}")
    if automove:
        extra.append("feed.automove=true")

    cfg = _load(config, extra)
    if cfg.feed.automove and not cfg.engine.binary_path:
        console.print("[yellow]Auto-move enabled without an engine; moves will not be computed[/yellow]")

    asyncio.run(_run_feed(sys.stdin, cfg))


if __name__ == "__main__":
    app()
