#!/usr/bin/env python3
"""
Command-line entry point for ServiceScout.

Commands:
  audit     Probe every cataloged URL and report broken / suspicious links
  discover  Crawl sitemaps and report likely services missing from the catalog
  config    Show the effective configuration

Global options:
  --config PATH       YAML/JSON config (default: configs/default.yaml if present)
  --catalog PATH      Service catalog JSON (overrides catalog_path)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Also write logs to this file
  --log-format FORMAT Logging format string

audit options:
  --json              Machine-readable JSON instead of Markdown
  --verbose           Batch progress on stderr
  --output PATH       Write the report to a file instead of stdout

discover options:
  --json              Machine-readable JSON instead of Markdown
  --limit INT         Max candidates probed for page info (default 500)
  --output PATH       Write the report to a file instead of stdout

Exit codes:
  0  success (audit: every link healthy)
  1  audit found at least one non-ok link
  2  fatal error (unreadable config or catalog, unexpected failure)

Example:
  service-scout --catalog service-catalog.json audit --json > links.json
"""
import asyncio
import sys
from pathlib import Path

import click

from service_scout import __version__
from service_scout.catalog import CatalogError, load_catalog
from service_scout.config import load_config
from service_scout.engine import run_audit, run_discovery
from service_scout.logger import DEFAULT_FORMAT, init_logging, logger
from service_scout.report.json_report import dump_json, render_json
from service_scout.report.markdown_report import (
    render_audit_markdown,
    render_discovery_markdown,
    render_markdown,
)

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])

EXIT_OK = 0
EXIT_ISSUES = 1
EXIT_FATAL = 2


def print_error(message: str, code: int = EXIT_FATAL):
    click.secho(message, fg='red', err=True)
    sys.exit(code)


def _progress(done: int, total: int) -> None:
    percent = round(done / total * 100) if total else 100
    click.echo(f'\rProgress: {percent}% ({done}/{total})', err=True, nl=False)


def _load_services(ctx):
    path = ctx.obj['catalog_path'] or ctx.obj['config'].catalog_path
    try:
        return load_catalog(path)
    except CatalogError as e:
        print_error(f'Fatal error: {e}')


def _emit(report, as_json: bool, output, pretty: bool, template_dir, markdown) -> None:
    if output is not None:
        if as_json:
            saved = render_json(report, output, pretty=pretty)
        else:
            saved = render_markdown(report, output, template_dir)
        click.echo(f'Report written: {saved}', err=True)
        return
    if as_json:
        click.echo(dump_json(report, pretty=pretty))
    else:
        click.echo(markdown(report, template_dir), nl=False)


def _report_options(func):
    func = click.option(
        '--template', '-t', 'template_dir',
        default=None,
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        help='Directory with Jinja2 Markdown templates overriding the built-in ones'
    )(func)
    func = click.option(
        '--pretty/--compact', default=True, show_default=True,
        help='Indent JSON output'
    )(func)
    func = click.option(
        '--output', '-o', 'output',
        default=None,
        type=click.Path(writable=True, dir_okay=False, path_type=Path),
        help='Write the report to this file instead of stdout'
    )(func)
    func = click.option(
        '--json', '-j', 'as_json', is_flag=True,
        help='Emit machine-readable JSON'
    )(func)
    return func


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='ServiceScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON config file.'
)
@click.option(
    '--catalog', 'catalog_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Service catalog JSON (overrides catalog_path from the config).'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Also write logs to this file'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, catalog_path, log_level, log_file, log_format):
    """ServiceScout: catalog link audits and service discovery."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg
    ctx.obj['catalog_path'] = catalog_path


@cli.command('audit', context_settings=CONTEXT_SETTINGS)
@_report_options
@click.option('--verbose', is_flag=True, help='Show batch progress on stderr')
@click.pass_context
def audit(ctx, as_json, output, pretty, template_dir, verbose):
    """Check every cataloged URL; exit 1 if any link is not ok."""
    cfg = ctx.obj['config']
    services = _load_services(ctx)
    progress = _progress if verbose and not as_json else None
    try:
        report = asyncio.run(run_audit(cfg, services, progress=progress))
    except Exception as e:
        logger.debug('Audit aborted', exc_info=True)
        print_error(f'Fatal error: {e}')
    if progress is not None:
        click.echo('', err=True)

    _emit(report, as_json, output, pretty, template_dir, render_audit_markdown)
    sys.exit(EXIT_ISSUES if report.has_issues else EXIT_OK)


@cli.command('discover', context_settings=CONTEXT_SETTINGS)
@_report_options
@click.option(
    '--limit', '-l', 'limit',
    type=click.IntRange(min=0),
    default=None,
    help='Max candidates probed for page info (overrides discovery.limit)'
)
@click.pass_context
def discover(ctx, as_json, output, pretty, template_dir, limit):
    """Find likely services in department sitemaps that the catalog lacks."""
    cfg = ctx.obj['config']
    if limit is not None:
        cfg = cfg.with_limit(limit)
    services = _load_services(ctx)
    progress = None if as_json else _progress
    try:
        report = asyncio.run(run_discovery(cfg, services, progress=progress))
    except Exception as e:
        logger.debug('Discovery aborted', exc_info=True)
        print_error(f'Fatal error: {e}')
    if progress is not None:
        click.echo('', err=True)

    _emit(report, as_json, output, pretty, template_dir, render_discovery_markdown)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
