#!/usr/bin/env python3
import logging

import click
from pydantic import ValidationError

from urlhealth.config import __version__, settings
from urlhealth.formatting import format_summary, write_status_file
from urlhealth.models import RunConfig
from urlhealth.runner import WorkerError, run_checks
from urlhealth.targets import TargetFileError, build_target_set

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]
DEFAULT_LOG_LEVEL = settings.LOG_LEVEL if settings.LOG_LEVEL in LOG_LEVELS else "INFO"


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err["loc"])
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("urls", nargs=-1)
@click.option("--file", "-f", "file", type=click.Path(dir_okay=False), help="Newline-delimited URL list (or YAML with a 'targets' list).")
@click.option("--workers", "-w", type=click.IntRange(min=0), default=settings.WORKERS, show_default=True, help="Number of worker threads.")
@click.option("--timeout", "-t", type=click.IntRange(min=0), default=settings.TIMEOUT_SECONDS, show_default=True, help="Per-request timeout in seconds.")
@click.option("--retries", "-r", type=click.IntRange(min=0), default=settings.RETRIES, show_default=True, help="Additional attempts after a transport failure.")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=settings.OUTPUT_PATH, show_default=True, help="Where to write the JSON results.")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=DEFAULT_LOG_LEVEL, show_default=True)
@click.version_option(__version__, prog_name="urlhealth")
def cli(urls, file, workers, timeout, retries, output, log_level):
    """
    Check that each URL answers an HTTP GET and write the results as JSON.
    Example:
      urlhealth --file urls.txt --workers 8 --retries 2 https://example.com
    """
    logging.basicConfig(level=log_level.upper(), format="%(asctime)s %(levelname)s %(message)s")

    try:
        config = RunConfig(
            workers=workers,
            timeout_s=timeout,
            retries=retries,
            user_agent=settings.USER_AGENT,
        )
    except ValidationError as exc:
        raise click.UsageError(_validation_message(exc)) from exc

    try:
        targets = build_target_set(urls, file)
    except TargetFileError as exc:
        raise click.UsageError(str(exc)) from exc

    try:
        records = run_checks(targets, config)
    except WorkerError as exc:
        raise click.ClickException(str(exc)) from exc

    try:
        out_file = write_status_file(records, output)
    except OSError as exc:
        raise click.ClickException(f"Unable to write {output}: {exc}") from exc
    click.echo(format_summary(records))
    click.echo(f"Output written to {out_file}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
