# === FILE: speed_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска SpeedScout через командную строку.

Команды:
  run       Обработать следующий батч URL из sitemap и обновить отчёты
  config    Показать текущую конфигурацию
  status    Показать прогресс по файлу состояния
  reset     Удалить файл состояния и начать сначала

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml)
  --limit INT         Жесткий лимит URL за запуск (override max_urls)
  --batch-size INT    Размер батча (override batch_size)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда run опции:
  --output-dir DIR    Папка для отчётов (override output_dir)
  --format FMT        Формат отчёта, можно несколько раз (json, csv, html)

Дополнительно:
  --version, -v       Показать версию SpeedScout

Пример:
  speed_scout --config configs/default.yaml --batch-size 20 run --format html
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from speed_scout import __version__
from speed_scout.aggregator import format_summary, summarize_batch
from speed_scout.config import load_config
from speed_scout.engine import run_checks
from speed_scout.logger import DEFAULT_FORMAT, init_logging
from speed_scout.state import StateStore

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def echo_summary(report, top_limit: int):
    summary = summarize_batch(
        report.batch_results,
        report.strategies,
        batch_urls=report.batch_urls,
        processed_urls=report.processed_urls,
        remaining=report.remaining,
        top_limit=top_limit,
    )
    for line in format_summary(summary):
        click.echo(line)


def partial_report(exc: BaseException):
    """RunReport, прикреплённый движком к исключению или к его причине."""
    while exc is not None:
        report = getattr(exc, 'run_report', None)
        if report is not None:
            return report
        exc = exc.__cause__ or exc.__context__
    return None


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SpeedScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/default.yaml',
    show_default=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--limit', '-l', 'limit',
    type=click.IntRange(min=1),
    default=None,
    help='Жесткий лимит URL за один запуск (override max_urls)'
)
@click.option(
    '--batch-size', '-b', 'batch_size',
    type=click.IntRange(min=1),
    default=None,
    help='Число URL в батче (override batch_size)'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, limit, batch_size, log_level, log_file, log_format):
    """Группа команд SpeedScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    overrides = {}
    if limit is not None:
        overrides['max_urls'] = limit
    if batch_size is not None:
        overrides['batch_size'] = batch_size
    if overrides:
        cfg = cfg.model_copy(update=overrides)
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('run', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--output-dir', '-o', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Папка для отчётов (override output_dir)'
)
@click.option(
    '--format', '-f', 'formats',
    multiple=True,
    type=click.Choice(['json', 'csv', 'html']),
    help='Формат отчёта; можно указать несколько раз'
)
@click.pass_context
def run(ctx, output_dir, formats):
    """Обработать следующий батч и перегенерировать отчёты."""
    cfg = ctx.obj['config']
    overrides = {}
    if output_dir is not None:
        overrides['output_dir'] = output_dir
    if formats:
        overrides['output_formats'] = list(dict.fromkeys(formats))
    if overrides:
        cfg = cfg.model_copy(update=overrides)

    click.echo(f'Starting bulk PageSpeed check: {cfg.sitemap_url}')
    try:
        report = asyncio.run(run_checks(cfg))
    except (KeyboardInterrupt, Exception) as e:
        partial = partial_report(e)
        if partial is not None:
            echo_summary(partial, cfg.show_top_performers)
        print_error('Fatal error: interrupted' if isinstance(e, KeyboardInterrupt) else f'Fatal error: {e}')

    echo_summary(report, cfg.show_top_performers)
    if cfg.skip_processed_urls and not report.state_saved:
        click.secho(f'Warning: state was not saved to {cfg.state_file}', fg='yellow', err=True)
    for path in report.outputs:
        click.echo(f'Report: {path}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(json.dumps(cfg.public_dict(), indent=2, ensure_ascii=False))


@cli.command('status', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def status(ctx):
    """Показать прогресс, сохранённый в файле состояния."""
    cfg = ctx.obj['config']
    store = StateStore(cfg.state_file, normalize=cfg.normalize_urls)
    state = store.load()
    ok = sum(1 for r in state.results if r.ok)
    click.echo(f'State file: {cfg.state_file}')
    click.echo(f'Processed URLs: {store.processed_url_count(state, cfg.strategies)}')
    click.echo(f'Processed checks: {len(state.processed_keys)}')
    click.echo(f'Results: {len(state.results)} ({ok} successful, {len(state.results) - ok} failed)')
    click.echo(f'Last updated: {state.last_updated or "never"}')


@cli.command('reset', context_settings=CONTEXT_SETTINGS)
@click.option('--yes', '-y', is_flag=True, help='Не спрашивать подтверждение')
@click.pass_context
def reset(ctx, yes):
    """Удалить файл состояния: следующий запуск начнёт с начала sitemap."""
    cfg = ctx.obj['config']
    if not yes:
        click.confirm(f'Delete {cfg.state_file}?', abort=True)
    try:
        removed = StateStore(cfg.state_file).reset()
    except OSError as e:
        print_error(f'Fatal error: {e}')
    click.echo('State file removed.' if removed else 'No state file to remove.')


if __name__ == "__main__":
    cli()
