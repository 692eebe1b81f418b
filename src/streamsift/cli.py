"""Command-line interface for StreamSift."""

import sys
from pathlib import Path

import click

from streamsift import __version__
from streamsift.config import load_config
from streamsift.core.parser import ProbeOutputParser
from streamsift.core.pipeline import StreamPipeline
from streamsift.models.media import MediaDescriptor
from streamsift.utils.logger import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (defaults to built-in defaults)",
)
@click.pass_context
def cli(ctx, config):
    """StreamSift - parse probe output and select media tracks."""
    try:
        cfg = load_config(config)
        ctx.ensure_object(dict)
        ctx.obj["config"] = cfg

        setup_logging(cfg.logging)

    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--name", default="", help="Source file name to report (defaults to the one in the output)")
def inspect(file, name):
    """Parse saved probe output and show what was found.

    Args:
        file: Saved ffmpeg/ffprobe output, banner text or JSON
    """
    descriptor = ProbeOutputParser().parse(_read(file), filename=name)
    _print_descriptor(descriptor)

    if descriptor.had_issues:
        sys.exit(2)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--name", default="", help="Source file name to report (defaults to the one in the output)")
@click.pass_context
def process(ctx, file, name):
    """Parse saved probe output and apply the configured track rules.

    Args:
        file: Saved ffmpeg/ffprobe output, banner text or JSON
    """
    config = ctx.obj["config"]

    descriptor = ProbeOutputParser().parse(_read(file), filename=name)
    result = StreamPipeline(config).process(descriptor)

    _print_descriptor(descriptor)
    click.echo("")
    if result.changed:
        click.secho(f"✓ {result}", fg="green")
    else:
        click.secho(f"⊘ {result}", fg="yellow")


@cli.command()
def version():
    """Show version information."""
    click.echo(f"StreamSift v{__version__}")


def _read(file: Path) -> str:
    return file.read_text(encoding="utf-8", errors="replace")


def _print_descriptor(descriptor: MediaDescriptor) -> None:
    click.echo(str(descriptor))

    fmt = descriptor.format
    if fmt.duration is not None or fmt.bitrate is not None:
        click.echo(f"  Duration: {fmt.duration or 'unknown'}  Bitrate: {fmt.bitrate or 'unknown'}")
    for key, value in fmt.tags.items():
        click.echo(f"  {key}: {value}")

    for stream in descriptor.all_streams():
        colour = "red" if stream.deleted else ("green" if stream.is_default else None)
        click.secho(f"  {stream}", fg=colour)

    for number, chapter in enumerate(descriptor.chapters, 1):
        click.echo(f"  Chapter {number}: {chapter}")

    for issue in descriptor.issues:
        click.secho(f"  ✗ {issue}", fg="yellow", err=True)


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
