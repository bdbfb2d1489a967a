"""lexiqueue CLI: study sessions, queue inspection, config and the local server."""

import asyncio
import json
import logging
import sys
import time
from typing import Annotated, Any

import typer

from lexiqueue.application.config import AppConfig, resolve_config
from lexiqueue.domain.errors import GradeCommitFailure
from lexiqueue.domain.rating import Rating

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="lexiqueue: spaced-repetition vocabulary review from the terminal.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

config_app = typer.Typer(help="Manage lexiqueue configuration.")
app.add_typer(config_app, name="config")

RATING_KEYS = {
    "a": Rating.AGAIN,
    "h": Rating.HARD,
    "g": Rating.GOOD,
    "e": Rating.EASY,
    "s": Rating.SKIP,
}


def _resolve_with_overrides(**overrides: Any) -> AppConfig:
    return resolve_config({k: v for k, v in overrides.items() if v is not None})


def _apply_verbosity(verbose: int) -> None:
    if verbose >= 2:
        logging.getLogger("lexiqueue").setLevel(logging.DEBUG)
    elif verbose <= 0:
        logging.getLogger("lexiqueue").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
):
    """Global settings for lexiqueue."""
    ctx.ensure_object(dict)
    ctx.obj["verbose_bonus"] = verbose
    _apply_verbosity(verbose)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def study(
    ctx: typer.Context,
    mode: Annotated[str | None, typer.Option(help="Session mode: learn or review.")] = None,
    category: Annotated[str | None, typer.Option(help="Category id or slug.")] = None,
    limit: Annotated[int | None, typer.Option(help="Cards per batch (1-40).")] = None,
    api_base: Annotated[str | None, typer.Option(help="Review service base URL.")] = None,
    token: Annotated[
        str | None, typer.Option(help="Bearer token.", envvar="LEXIQUEUE_TOKEN")
    ] = None,
):
    """[bold green]Study[/bold green] cards interactively until the session is complete."""
    config = _resolve_with_overrides(
        mode=mode,
        category=category,
        limit=limit,
        api_base=api_base,
        token=token,
        verbose=ctx.obj.get("verbose_bonus", 1),
    )

    from lexiqueue.application.factory import build_engine

    async def run():
        engine = build_engine(config)
        try:
            await engine.refresh(reset=True)
            if engine.error:
                typer.secho(f"Error: {engine.error}", fg="red")
                raise typer.Exit(1)

            while engine.current_card is not None:
                card = engine.current_card
                stats = engine.stats
                typer.echo("")
                typer.secho(
                    f"[{stats.reviewed}/{stats.total}] {card.term}", bold=True
                )
                started = time.monotonic()
                typer.prompt("Press Enter to reveal", default="", show_default=False)
                translation = card.word.get("translation") or card.word.get("definition")
                if translation:
                    typer.echo(f"  -> {translation}")

                choice = typer.prompt(
                    "Rate [a]gain [h]ard [g]ood [e]asy [s]kip [q]uit", default="g"
                ).strip().lower()
                if choice == "q":
                    break
                rating = RATING_KEYS.get(choice[:1])
                if rating is None:
                    typer.secho(f"Unknown choice '{choice}'", fg="yellow")
                    continue

                duration_ms = int((time.monotonic() - started) * 1000)
                try:
                    await engine.grade_card(rating, duration_ms=duration_ms)
                except GradeCommitFailure as e:
                    typer.secho(f"Not saved: {e}. Card kept at the front.", fg="red")
                    continue

                award = engine.session_meta.last_award
                if award:
                    typer.secho(f"  Award: {award}", fg="magenta")

            _print_summary(engine)
        finally:
            await engine.aclose()

    asyncio.run(run())


def _print_summary(engine) -> None:
    stats = engine.stats
    meta = engine.session_meta
    if engine.is_session_complete:
        typer.secho("Session complete!", fg="green")
    typer.echo(
        f"Reviewed: {stats.reviewed}  Correct: {stats.correct}  "
        f"Lapses: {stats.lapses}  Skipped: {stats.skipped}  Streak: {stats.streak}"
    )
    goal = f"/{meta.daily_goal}" if meta.daily_goal is not None else ""
    typer.echo(
        f"XP: {meta.xp_earned}  Combo: {meta.combo} (max {meta.max_combo})  "
        f"Daily: {meta.daily_progress}{goal}"
    )


@app.command("queue")
def queue(
    ctx: typer.Context,
    mode: Annotated[str | None, typer.Option(help="Session mode: learn or review.")] = None,
    category: Annotated[str | None, typer.Option(help="Category id or slug.")] = None,
    limit: Annotated[int | None, typer.Option(help="Cards per batch (1-40).")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Fetch a batch and print it without grading anything."""
    config = _resolve_with_overrides(
        mode=mode, category=category, limit=limit, verbose=ctx.obj.get("verbose_bonus", 1)
    )

    from lexiqueue.application.factory import build_engine

    async def run():
        engine = build_engine(config)
        try:
            await engine.refresh(reset=True)
            return engine.to_dict(), [card.term for card in engine.queue], engine.error
        finally:
            await engine.aclose()

    state, terms, error = asyncio.run(run())
    if error:
        typer.secho(f"Error: {error}", fg="red")
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps({**state, "queue": terms}, indent=2, default=str))
        return

    typer.echo(f"Mode: {config.mode}  Cards: {len(terms)}")
    for index, term in enumerate(terms, start=1):
        typer.echo(f"{index:>3}. {term}")


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Bind address.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port.")] = 8777,
    reload: Annotated[bool, typer.Option("--reload", help="Auto-reload on changes.")] = False,
):
    """Run the local session API for UI clients."""
    import uvicorn

    uvicorn.run("lexiqueue.server:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = config.model_dump()
    if d.get("token"):
        d["token"] = "***"
    typer.echo(json.dumps(d, indent=2, default=str))


def main():
    app()


if __name__ == "__main__":
    main()
