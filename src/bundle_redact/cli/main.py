"""Typer-based command line interface."""
from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import structlog
import click
import typer

from ..config import AppConfig, dump_default_config, load_config
from ..exceptions import RedactError
from ..ledger import RedactionLedger
from ..logging import configure_logging
from ..paths import project_config_path
from ..redactor.engines import RedactionEngine, RedactionResult
from ..rules.schema import RuleSpec, rules_from_path

app = typer.Typer(help="Redact sensitive values from collected diagnostic files")

logger = structlog.get_logger(__name__)


@app.callback()
def main(ctx: typer.Context, config: Optional[Path] = typer.Option(None, "--config", metavar="PATH")) -> None:
    ctx.obj = load_config(config)
    configure_logging(ctx.obj.logging.normalized_level(), ctx.obj.logging.format)


def _current_config() -> AppConfig:
    ctx = click.get_current_context()
    return ctx.obj


def _load_rules(paths: Sequence[Path]) -> List[RuleSpec]:
    rules: List[RuleSpec] = []
    for path in paths:
        try:
            rules.extend(rules_from_path(path))
        except (OSError, ValueError) as exc:
            typer.echo(f"Cannot load rules from {path}: {exc}", err=True)
            raise typer.Exit(code=2) from exc
    return rules


def _collect(inputs: Sequence[Path]) -> Iterator[Path]:
    for item in inputs:
        if item.is_dir():
            yield from sorted(path for path in item.rglob("*") if path.is_file())
        else:
            yield item


def _relative_name(path: Path, root: Path) -> str:
    resolved = path.resolve()
    try:
        return resolved.relative_to(root.resolve()).as_posix()
    except ValueError:
        return path.name


def _redact_one(
    engine: RedactionEngine,
    source: Path,
    name: str,
    output_dir: Path,
    rules: Sequence[RuleSpec],
) -> RedactionResult:
    with source.open("rb") as handle:
        result = engine.redact_file(handle, name, rules)
    target = output_dir / name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(result.content)
    return result


@app.command()
def redact(
    inputs: List[Path] = typer.Argument(..., exists=True, readable=True, help="Files or directories"),
    output_dir: Path = typer.Option(..., "-o", "--output-dir", help="Write redacted copies here"),
    rules: Optional[List[Path]] = typer.Option(None, "--rules", help="Custom rule document (repeatable)"),
    root: Optional[Path] = typer.Option(None, "--root", help="Base for the relative paths rules match against"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write the redaction list here instead of stdout"),
) -> None:
    config = _current_config()
    settings = config.redaction
    rule_specs = _load_rules([*settings.rules_files, *(rules or [])])
    base = root or Path.cwd()
    ledger = RedactionLedger()
    engine = RedactionEngine(
        ledger,
        include_builtins=settings.include_builtins,
        strict=settings.strict_rules,
        chunk_size=settings.chunk_size,
    )

    failures = 0
    with ThreadPoolExecutor(max_workers=settings.workers) as pool:
        futures = {}
        for source in _collect(inputs):
            name = _relative_name(source, base)
            futures[pool.submit(_redact_one, engine, source, name, output_dir, rule_specs)] = name
        for future in as_completed(futures):
            name = futures[future]
            try:
                result = future.result()
            except (RedactError, OSError) as exc:
                failures += 1
                logger.error("redact.file.failed", file=name, error=str(exc))
                typer.echo(f"{name}: {exc}", err=True)
                continue
            for error in result.errors:
                typer.echo(f"{name}: {error}", err=True)

    listing = ledger.snapshot()
    ledger.close()
    payload = json.dumps(listing.to_dict(), indent=2, sort_keys=True)
    if report:
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(payload + "\n", encoding="utf-8")
        typer.echo(f"Redaction report written to {report}")
    else:
        typer.echo(payload)
    logger.info("redact.done", files=len(futures), failures=failures, redactions=listing.total())
    if failures:
        raise typer.Exit(code=1)


@app.command("rules-show")
def rules_show(rules: List[Path] = typer.Option(..., "--rules", help="Rule document to inspect")) -> None:
    specs = _load_rules(rules)
    typer.echo(json.dumps([spec.model_dump(by_alias=True, exclude_defaults=True) for spec in specs], indent=2))


@app.command("config-init")
def config_init(
    path: Optional[Path] = typer.Option(None, "--path", help="Target file, defaults to the project config"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    target = path or project_config_path()
    if target.exists() and not force:
        typer.echo(f"{target} already exists, pass --force to overwrite it", err=True)
        raise typer.Exit(code=1)
    dump_default_config(target)
    typer.echo(f"Default configuration written to {target}")


@app.command()
def builtins() -> None:
    for name in RedactionEngine(RedactionLedger()).builtin_names:
        typer.echo(name)


@app.command()
def version() -> None:
    from ..version import __version__

    typer.echo(__version__)


if __name__ == "__main__":  # pragma: no cover
    app()
