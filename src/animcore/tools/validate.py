from __future__ import annotations
from pathlib import Path
import json
import logging
from typing import Any, List, Optional, Sequence
import yaml
import typer
from animcore.engine.settings import Settings, configure_logging, load_settings
from animcore.engine.validation import PathItem, validate_animation_data

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False)


def _load(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(text) or {}
    return json.loads(text)


def format_path(path: Sequence[PathItem]) -> str:
    """("fireball", 0, "file") -> "fireball[0].file"."""
    out = ""
    for step in path:
        if isinstance(step, int):
            out += f"[{step}]"
        else:
            out += f".{step}" if out else str(step)
    return out or "<root>"


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else load_settings()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
):
    settings = load_settings()
    ctx.obj = settings
    configure_logging(settings, verbose)


@app.command("validate")
def validate_cmd(
    ctx: typer.Context,
    files: List[Path] = typer.Argument(..., help="Animation files (.json, .yaml, .yml)"),
    as_json: bool = typer.Option(False, "--json", help="Print a JSON report instead of error lines"),
):
    settings = _settings(ctx)
    ok = True
    report: list[dict] = []
    for fp in files:
        try:
            data = _load(fp)
        except (OSError, ValueError, yaml.YAMLError) as e:
            # json.JSONDecodeError is a ValueError
            ok = False
            logger.debug("Could not load %s", fp, exc_info=True)
            if as_json:
                report.append({"file": str(fp), "success": False, "error": str(e)})
            else:
                typer.echo(f"[ERROR] {fp}: cannot parse: {e}", err=True)
            continue

        result = validate_animation_data(data)
        if not result.success:
            ok = False
        if as_json:
            report.append({"file": str(fp), **result.to_dict()})
            continue
        for issue in result.issues:
            typer.echo(f"[ERROR] {fp}: {format_path(issue.path)}: {issue.message} ({issue.kind.value})", err=True)

    if as_json:
        typer.echo(json.dumps(report, indent=settings.json_indent))
    elif ok:
        typer.echo(f"{len(files)} file(s) validated successfully.")
    if not ok:
        raise typer.Exit(code=1)


@app.command("export-schemas")
def export_schemas_cmd(
    ctx: typer.Context,
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory (default: settings.schema_dir)"),
):
    from animcore.tools.export_schemas import export_schemas
    settings = _settings(ctx)
    out = out or Path(settings.schema_dir)
    export_schemas(out, indent=settings.json_indent)
    typer.echo(f"Exported schemas to {out}")


@app.command("schema")
def schema_cmd(ctx: typer.Context, name: str = typer.Argument(..., help="animations | tokenImages")):
    from animcore.tools.export_schemas import get_json_schema
    try:
        schema = get_json_schema(name)
    except ValueError as e:
        typer.echo(f"[ERROR] {e}", err=True)
        raise typer.Exit(code=2)
    typer.echo(json.dumps(schema, indent=_settings(ctx).json_indent))


if __name__ == "__main__":
    app()
