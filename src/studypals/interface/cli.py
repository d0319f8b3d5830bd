"""studypals CLI: review scheduling, analytics and configuration commands."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

import typer

from studypals.application.config import AppConfig, resolve_config
from studypals.domain.review.models import ReviewGrade
from studypals.infrastructure.serialization import parse_timestamp

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="studypals: spaced-repetition scheduling and study analytics.",
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

# ---------------------------------------------------------------------------
# Subgroups
# ---------------------------------------------------------------------------

review_app = typer.Typer(help="Spaced-repetition review scheduling.", no_args_is_help=True)
app.add_typer(review_app, name="review")

analytics_app = typer.Typer(help="Study analytics aggregation.", no_args_is_help=True)
app.add_typer(analytics_app, name="analytics")

config_app = typer.Typer(help="Manage studypals configuration.")
app.add_typer(config_app, name="config")


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
    ] = 0,
):
    """Global settings for studypals."""
    ctx.ensure_object(dict)
    ctx.obj["verbose_bonus"] = verbose


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_with_overrides(ctx: typer.Context, **overrides: Any) -> AppConfig:
    """Resolve config with CLI overrides and apply its verbosity to logging."""
    obj = ctx.obj or {}
    if obj.get("verbose_bonus"):
        overrides["verbose"] = obj["verbose_bonus"]
    config = resolve_config(overrides)
    logging.getLogger("studypals").setLevel(
        logging.DEBUG if config.verbose > 1 else logging.INFO
    )
    return config


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        typer.secho(f"Could not read {path}: {e}", fg="red")
        raise typer.Exit(1)


def _resolve_now(value: str | None, reference: datetime | None = None) -> datetime:
    """
    Parse --now, or take the current time in the same tz-awareness as the data.
    """
    if value:
        return parse_timestamp(value)
    if reference is not None and reference.tzinfo is not None:
        return datetime.now(reference.tzinfo)
    return datetime.now()


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


NowOption = Annotated[
    str | None, typer.Option("--now", help="Reference time (ISO-8601). Defaults to now.")
]


# ---------------------------------------------------------------------------
# Review subgroup
# ---------------------------------------------------------------------------


@review_app.command("grade")
def review_grade(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card being reviewed.")],
    grade: Annotated[ReviewGrade, typer.Option("--grade", "-g", help="Recall quality.")],
    state: Annotated[
        Path | None,
        typer.Option("--state", help="JSON file with the card's current review state."),
    ] = None,
    user: Annotated[str | None, typer.Option(help="User ID for a new card.")] = None,
    now: NowOption = None,
):
    """Apply a grade to a card and print its next [bold]review state[/bold]."""
    from studypals.application.review import apply_grade, new_review_state
    from studypals.infrastructure.serialization import (
        review_state_from_dict,
        review_state_to_dict,
    )

    if state is not None:
        try:
            current = review_state_from_dict(_load_json(state))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            typer.secho(f"Invalid review state in {state}: {e}", fg="red")
            raise typer.Exit(1)
        ts = _resolve_now(now, current.due_at)
    else:
        ts = _resolve_now(now)
        current = new_review_state(card_id, user or _resolve_with_overrides(ctx).user_id, ts)

    updated = apply_grade(current, grade, ts)
    _echo_json(review_state_to_dict(updated))


@review_app.command("stats")
def review_stats_cmd(
    reviews: Annotated[Path, typer.Argument(help="JSON file with a list of review states.")],
    now: NowOption = None,
):
    """Summarize due, learning and mature cards."""
    from studypals.application.review import review_stats
    from studypals.infrastructure.serialization import review_state_from_dict

    try:
        states = [review_state_from_dict(item) for item in _load_json(reviews)]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        typer.secho(f"Invalid review states in {reviews}: {e}", fg="red")
        raise typer.Exit(1)

    ts = _resolve_now(now, states[0].due_at if states else None)
    _echo_json(review_stats(states, ts))


# ---------------------------------------------------------------------------
# Analytics subgroup
# ---------------------------------------------------------------------------


@analytics_app.command("compute")
def analytics_compute(
    ctx: typer.Context,
    history: Annotated[
        Path,
        typer.Argument(help="JSON file with 'sessions' and optional 'quizzes' lists."),
    ],
    user: Annotated[str | None, typer.Option(help="User ID. Defaults to config.")] = None,
    now: NowOption = None,
):
    """[bold green]Recompute[/bold green] analytics from a full history export."""
    from studypals.application.analytics import compute_analytics
    from studypals.infrastructure.serialization import (
        analytics_to_dict,
        quiz_from_dict,
        session_from_dict,
    )

    raw = _load_json(history)
    try:
        sessions = [session_from_dict(s) for s in raw.get("sessions", [])]
        quizzes = [quiz_from_dict(q) for q in raw.get("quizzes", [])]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        typer.secho(f"Invalid history in {history}: {e}", fg="red")
        raise typer.Exit(1)

    user_id = user or _resolve_with_overrides(ctx).user_id
    ts = _resolve_now(now, sessions[0].start_time if sessions else None)
    analytics = compute_analytics(user_id, sessions, quizzes, ts)
    _echo_json(analytics_to_dict(analytics))


@analytics_app.command("fold")
def analytics_fold(
    snapshot: Annotated[Path, typer.Argument(help="JSON file with the current analytics.")],
    session: Annotated[Path, typer.Argument(help="JSON file with the new session.")],
    now: NowOption = None,
):
    """Fold one session into an existing analytics snapshot."""
    from studypals.application.analytics import fold_session
    from studypals.infrastructure.serialization import (
        analytics_from_dict,
        analytics_to_dict,
        session_from_dict,
    )

    try:
        current = analytics_from_dict(_load_json(snapshot))
        new_session = session_from_dict(_load_json(session))
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        typer.secho(f"Invalid input: {e}", fg="red")
        raise typer.Exit(1)

    ts = _resolve_now(now, new_session.start_time)
    _echo_json(analytics_to_dict(fold_session(current, new_session, ts)))


@analytics_app.command("summary")
def analytics_summary(
    snapshot: Annotated[Path, typer.Argument(help="JSON file with analytics.")],
    subject: Annotated[
        str | None, typer.Option(help="Show insights for a single subject instead.")
    ] = None,
):
    """Print the performance summary (or one subject's insights)."""
    from studypals.application.analytics.insights import performance_summary, subject_insights
    from studypals.infrastructure.serialization import analytics_from_dict

    try:
        analytics = analytics_from_dict(_load_json(snapshot))
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        typer.secho(f"Invalid analytics in {snapshot}: {e}", fg="red")
        raise typer.Exit(1)

    if subject is not None:
        insights = subject_insights(analytics, subject)
        if not insights:
            typer.secho(f"No data for subject '{subject}'.", fg="yellow")
            raise typer.Exit(1)
        _echo_json(insights)
    else:
        _echo_json(performance_summary(analytics))


@analytics_app.command("refresh")
def analytics_refresh(
    ctx: typer.Context,
    user: Annotated[str | None, typer.Option(help="User ID. Defaults to config.")] = None,
    data_dir: Annotated[
        Path | None, typer.Option(help="Directory holding exported user data.")
    ] = None,
    now: NowOption = None,
):
    """Recompute and store analytics for a user in the data directory."""
    import asyncio

    from studypals.application.analytics import AnalyticsService
    from studypals.infrastructure.adapters.json_store import JsonHistoryStore
    from studypals.infrastructure.serialization import analytics_to_dict

    config = _resolve_with_overrides(ctx, user_id=user, data_dir=data_dir)
    store = JsonHistoryStore(config.data_dir)
    service = AnalyticsService(store)

    async def run():
        sessions = await store.get_sessions(config.user_id)
        ts = _resolve_now(now, sessions[0].start_time if sessions else None)
        return await service.refresh(config.user_id, ts)

    try:
        analytics = asyncio.run(run())
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        typer.secho(f"Refresh failed for {config.user_id}: {e}", fg="red")
        raise typer.Exit(1)

    typer.secho(
        f"Updated analytics for {config.user_id} in {config.data_dir / config.user_id}",
        fg="green",
        err=True,
    )
    _echo_json(analytics_to_dict(analytics))


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve_with_overrides(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
