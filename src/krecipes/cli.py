"""Command line interface.

Usage:
    krecipes build --content-dir src/content/recipes --output-dir dist --clean
    krecipes check --strict
    krecipes list --category storage
    krecipes watch
    krecipes serve --port 8000
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from krecipes.catalog.checks import has_failures, list_checks, run_checks
from krecipes.content.types import Recipe
from krecipes.errors import BuildError, ConfigError
from krecipes.shared.config import SiteConfig, load_config
from krecipes.shared.logger import BuildLogger
from krecipes.site.builder import SiteBuilder

PATH = click.Path(path_type=Path)


def _config(ctx: click.Context, **overrides: Any) -> SiteConfig:
    try:
        return load_config(ctx.obj.get("config_path"), overrides=overrides)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _format_table(recipes: list[Recipe]) -> str:
    if not recipes:
        return "No recipes found."
    lines = [
        f"{'Published':<12}{'Difficulty':<14}{'Category':<17}Slug",
        f"{'---------':<12}{'----------':<14}{'--------':<17}----",
    ]
    for r in recipes:
        lines.append(
            f"{r.meta.publish_date.isoformat():<12}{r.meta.difficulty:<14}{r.category:<17}{r.slug}"
        )
    return "\n".join(lines)


@click.group()
@click.option("--config", "config_path", type=PATH, default=None,
              help="YAML config file (default: ./krecipes.yaml when present)")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None) -> None:
    """Build and check the Kubernetes Recipes site."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command()
@click.option("--content-dir", type=PATH, default=None, help="Directory holding <slug>.md files")
@click.option("--output-dir", type=PATH, default=None, help="Where the site is written")
@click.option("--drafts/--no-drafts", "include_drafts", default=None, help="Include draft recipes")
@click.option("--strict", is_flag=True, default=None, help="Fail on warnings too")
@click.option("--clean", is_flag=True, help="Empty the output directory first")
@click.option("--log-file", type=PATH, default=None, help="INFO+ log file")
@click.option("--trace-file", type=PATH, default=None, help="Full-detail log file")
@click.option("--quiet", is_flag=True, help="Only print warnings and errors")
@click.pass_context
def build(ctx: click.Context, content_dir, output_dir, include_drafts, strict, clean,
          log_file, trace_file, quiet) -> None:
    """Render every recipe, listing pages, catalog.json and sitemap.xml."""
    config = _config(ctx, content_dir=content_dir, output_dir=output_dir,
                     include_drafts=include_drafts, strict=strict or None)

    log = BuildLogger(log_file=log_file, trace_file=trace_file,
                      min_level="WARN" if quiet else "INFO")
    log.install_stdlib_bridge(root_logger="krecipes", level=logging.DEBUG if trace_file else logging.INFO)
    failed = False
    try:
        log.section("krecipes build")
        log.info(f"Content: {config.content_dir}")
        log.info(f"Output:  {config.output_dir}")
        log.info(f"Site:    {config.site_url}")
        with log.timer("build"):
            result = SiteBuilder(config).build(clean=clean)
        log.metric("recipes", len(result.catalog))
        log.metric("drafts_skipped", result.drafts_skipped)
        log.metric("files_written", len(result.pages))
        log.metric("issues", len(result.issues))
    except BuildError as exc:
        log.error(str(exc))
        failed = True
    finally:
        log.summary()
        log.remove_stdlib_bridge("krecipes")
        log.close()
    sys.exit(1 if failed else 0)


@main.command()
@click.option("--content-dir", type=PATH, default=None)
@click.option("--strict", is_flag=True, default=None, help="Fail on warnings too")
@click.option("--drafts/--no-drafts", "include_drafts", default=None)
@click.option("--only", multiple=True, type=click.Choice(list_checks()),
              help="Run only these checks (repeatable)")
@click.option("--json", "json_output", is_flag=True, help="Print issues as JSON")
@click.pass_context
def check(ctx: click.Context, content_dir, strict, include_drafts, only, json_output) -> None:
    """Report content problems without writing anything."""
    config = _config(ctx, content_dir=content_dir, strict=strict or None,
                     include_drafts=include_drafts)
    check_ctx, _ = SiteBuilder(config).collect()
    issues = run_checks(check_ctx, only or None)
    failed = has_failures(issues, strict=config.strict)

    if json_output:
        click.echo(json.dumps({
            "recipes": len(check_ctx.catalog),
            "failed": failed,
            "issues": [i.to_dict() for i in issues],
        }, indent=2))
    else:
        for issue in issues:
            click.echo(f"{issue.severity.upper():8}{issue}", err=issue.severity == "error")
        errors = sum(1 for i in issues if i.severity == "error")
        click.echo(
            f"{len(check_ctx.catalog)} recipes checked: "
            f"{errors} error(s), {len(issues) - errors} warning(s)"
        )
    sys.exit(1 if failed else 0)


@main.command(name="list")
@click.option("--content-dir", type=PATH, default=None)
@click.option("--category", default=None)
@click.option("--tag", default=None)
@click.option("--difficulty", type=click.Choice(["beginner", "intermediate", "advanced"]), default=None)
@click.option("--drafts/--no-drafts", "include_drafts", default=None)
@click.option("--json", "json_output", is_flag=True, help="Print recipe summaries as JSON")
@click.pass_context
def list_recipes(ctx: click.Context, content_dir, category, tag, difficulty,
                 include_drafts, json_output) -> None:
    """List recipes, newest first."""
    config = _config(ctx, content_dir=content_dir, include_drafts=include_drafts)
    check_ctx, _ = SiteBuilder(config).collect()
    recipes = check_ctx.catalog.filter(category=category, tag=tag, difficulty=difficulty)
    if json_output:
        click.echo(json.dumps([r.summary() for r in recipes], indent=2))
    else:
        click.echo(_format_table(recipes))


@main.command()
@click.option("--content-dir", type=PATH, default=None)
@click.option("--output-dir", type=PATH, default=None)
@click.option("--debounce", type=float, default=0.5, show_default=True,
              help="Seconds of quiet before rebuilding")
@click.pass_context
def watch(ctx: click.Context, content_dir, output_dir, debounce) -> None:
    """Build once, then rebuild whenever a recipe changes."""
    from krecipes.site.watcher import SiteWatcher

    config = _config(ctx, content_dir=content_dir, output_dir=output_dir)
    log = BuildLogger()
    log.install_stdlib_bridge(root_logger="krecipes", level=logging.INFO)
    builder = SiteBuilder(config)
    try:
        try:
            builder.build()
        except BuildError as exc:
            log.error(f"Initial build failed: {exc}")
        watcher = SiteWatcher(config.content_dir, rebuild=builder.build, debounce_seconds=debounce)
        watcher.start(install_signal_handlers=True)
        log.info("Watching for changes, Ctrl+C to stop")
        watcher.wait()
    finally:
        log.remove_stdlib_bridge("krecipes")
        log.close()


@main.command()
@click.option("--content-dir", type=PATH, default=None)
@click.option("--output-dir", type=PATH, default=None)
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, type=int, show_default=True)
@click.pass_context
def serve(ctx: click.Context, content_dir, output_dir, host, port) -> None:
    """Serve the built site and the catalog API."""
    import uvicorn

    from krecipes.site.app import create_app

    config = _config(ctx, content_dir=content_dir, output_dir=output_dir)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(create_app(config), host=host, port=port)


if __name__ == "__main__":
    main()
