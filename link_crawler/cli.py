# === FILE: link_crawler/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point for LinkCrawler.

Commands:
  crawl     Run a crawl and print (and optionally save) the report
  config    Show the effective configuration

Global options:
  --config PATH       YAML/JSON config (default: ./configs/default.yaml, else the packaged one)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Also write logs to this file (stderr always)
  --log-format FORMAT Logging format string

crawl options:
  --seed URL          Override seed_url
  --max-visits INT    Override the visit cap
  --workers INT       Override the number of concurrent workers
  --free-crawl/--no-free-crawl
  --debug             Log domain-policy rejections
  --json PATH         Save a JSON report
  --html PATH         Save an HTML report
  --template DIR      Directory with Jinja2 templates
  --format text|json  Format of the report printed to stdout
  --pretty            Indent JSON output

Example:
  link-crawler -c my-crawl.yaml crawl --max-visits 50 --json crawl.json
"""
import asyncio
import sys
from pathlib import Path

import click
from click.core import ParameterSource
from pydantic import ValidationError

from link_crawler import __version__
from link_crawler.config import apply_overrides, load_config
from link_crawler.engine import start_crawl
from link_crawler.logger import DEFAULT_FORMAT, init_logging
from link_crawler.report.html_report import render_html
from link_crawler.report.json_report import render_json
from link_crawler.report.text_report import render_text

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _from_command_line(ctx, name, value):
    """Only flags actually given on the command line override the config file."""
    if ctx.get_parameter_source(name) is ParameterSource.COMMANDLINE:
        return value
    return None


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='LinkCrawler, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Path to a YAML/JSON config file  [default: ./configs/default.yaml or the packaged default]'
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
def cli(ctx, config_path, log_level, log_file, log_format):
    """LinkCrawler command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError, ValidationError) as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg
    ctx.obj['logging'] = {
        'level': log_level,
        'log_file': str(log_file) if log_file else None,
        'log_format': log_format,
    }


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option('--seed', 'seed_url', default=None, help='Seed URL (overrides seed_url)')
@click.option('--max-visits', '-n', 'max_visits', type=int, default=None, help='Visit cap')
@click.option('--workers', '-w', 'workers', type=int, default=None, help='Concurrent workers')
@click.option('--free-crawl/--no-free-crawl', 'free_crawl', default=False, help='Follow any host not blacklisted')
@click.option('--debug', 'debug', is_flag=True, default=False, help='Log domain-policy rejections')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save a JSON report to this file'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save an HTML report to this file'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with Jinja2 templates (packaged ones by default)'
)
@click.option(
    '--format', 'output_format',
    default='text', show_default=True,
    type=click.Choice(['text', 'json']),
    help='Format of the report printed to stdout'
)
@click.option('--pretty', is_flag=True, help='Indent JSON output (2 spaces)')
@click.pass_context
def crawl(ctx, seed_url, max_visits, workers, free_crawl, debug,
          json_output, html_output, template_dir, output_format, pretty):
    """Run a crawl and print the visit order and elapsed time."""
    try:
        cfg = apply_overrides(ctx.obj['config'], {
            'seed_url': seed_url,
            'max_visits': max_visits,
            'workers': workers,
            'free_crawl': _from_command_line(ctx, 'free_crawl', free_crawl),
            'debug': _from_command_line(ctx, 'debug', debug),
        })
    except ValidationError as e:
        print_error(f'Invalid option: {e}')

    if cfg.debug and ctx.obj['logging']['level'] != 'DEBUG':
        init_logging(**{**ctx.obj['logging'], 'level': 'DEBUG'})

    report = asyncio.run(start_crawl(cfg))

    if output_format == 'json':
        click.echo(report.json(pretty=pretty))
    else:
        click.echo(render_text(report))

    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}', err=True)
        except OSError as e:
            print_error(f'Failed to save JSON report: {e}')

    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}', err=True)
        except OSError as e:
            print_error(f'Failed to save HTML report: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
