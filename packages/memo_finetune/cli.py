"""CLI for the ``memo_finetune`` package.

Typer-based console interface over the stage functions in
:mod:`memo_finetune.api`. The root callback loads a local ``.env`` with
``python-dotenv`` (without overriding variables already set) and configures
logging. Invoked without a subcommand, the CLI runs only the final
``prepare-jsonl`` stage.

Every command reports a failure as a single ``Error: ...`` line on stderr and
exits with status 1. When the failure is an OpenAI API error carrying an HTTP
response body, that body is reported instead of the generic message.
"""

from __future__ import annotations

import json
import random
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import openai
import typer
from dotenv import load_dotenv

from . import api
from .config import Settings
from .logging_setup import configure_logging

T = TypeVar("T")


def _describe_error(exc: BaseException) -> str:
    """Prefer the HTTP response body of an API error over its generic message."""

    if isinstance(exc, openai.APIStatusError):
        body = exc.body
        if body:
            return body if isinstance(body, str) else json.dumps(body, ensure_ascii=False)
        try:
            text = exc.response.text
        except Exception:  # noqa: BLE001 - response may be unreadable after a stream error
            text = ""
        if text:
            return text
    return str(exc) or exc.__class__.__name__


def _run_stage(name: str, fn: Callable[[], T]) -> T:
    try:
        return fn()
    except Exception as e:
        print(f"Error: {name} failed: {_describe_error(e)}", file=sys.stderr)
        raise typer.Exit(1) from e


def _settings(ctx: typer.Context) -> Settings:
    obj: Any = ctx.obj
    if isinstance(obj, Settings):
        return obj
    return Settings.from_env()


app = typer.Typer(
    add_completion=False,
    help=(
        "Build a prompt/completion fine-tuning set from a bank transaction export. "
        "Loads OPENAI_API_KEY and MF_* settings from a local .env before running."
    ),
)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    data_dir: Path | None = typer.Option(
        None, "--data-dir", help="Directory holding stage files (overrides MF_DATA_DIR)."
    ),
    log_level: str | None = typer.Option(
        None, help="Log level name (overrides MEMO_FINETUNE_LOG_LEVEL)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory and resolves settings.
    With no subcommand, runs ``prepare-jsonl``.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)

    ctx.obj = Settings.from_env().with_overrides(data_dir=data_dir)

    if ctx.invoked_subcommand is None:
        _run_stage("prepare-jsonl", lambda: api.prepare_jsonl_stage(ctx.obj))


@app.command("classify")
def classify_cmd(
    ctx: typer.Context,
    *,
    model: str | None = typer.Option(None, help="Completion model (overrides MF_MODEL)."),
    concurrency: int | None = typer.Option(
        None, min=1, help="Max in-flight classifications (overrides MF_CONCURRENCY)."
    ),
) -> None:
    """Classify emoji memos in txs.tsv into safe.json / unsafe.json."""

    settings = _settings(ctx).with_overrides(model=model, concurrency=concurrency)
    stats = _run_stage("classify", lambda: api.classify_stage(settings))
    print(
        f"Classified {stats.classified} ({stats.safe} safe, {stats.unsafe} unsafe); "
        f"skipped {stats.cached} cached and {stats.ineligible} ineligible."
    )


@app.command("fix-emoji")
def fix_emoji_cmd(ctx: typer.Context) -> None:
    """Normalize emoji spacing: safe.json -> safe-emojifix.json."""

    count = _run_stage("fix-emoji", lambda: api.fix_emoji_stage(_settings(ctx)))
    print(f"Wrote {count} records.")


@app.command("dedupe")
def dedupe_cmd(
    ctx: typer.Context,
    *,
    cap: int | None = typer.Option(
        None, min=1, help="Max records per distinct memo (overrides MF_SAMPLE_CAP)."
    ),
    seed: int | None = typer.Option(None, help="Random seed for reproducible sampling."),
) -> None:
    """Cap records per memo: safe-emojifix.json -> safe-deduped.json."""

    settings = _settings(ctx).with_overrides(sample_cap=cap)
    rng = random.Random(seed) if seed is not None else None
    count = _run_stage("dedupe", lambda: api.dedupe_stage(settings, rng=rng))
    print(f"Kept {count} records.")


@app.command("prepare-jsonl")
def prepare_jsonl_cmd(ctx: typer.Context) -> None:
    """Format safe-deduped.json as finetuning.jsonl."""

    count = _run_stage("prepare-jsonl", lambda: api.prepare_jsonl_stage(_settings(ctx)))
    print(f"Wrote {count} examples.")


@app.command("run-all")
def run_all_cmd(ctx: typer.Context) -> None:
    """Run classify, fix-emoji, dedupe and prepare-jsonl in order."""

    _run_stage("run-all", lambda: api.run_all(_settings(ctx)))


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    main()
