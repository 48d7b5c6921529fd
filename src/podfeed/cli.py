"""CLI entry point for podfeed."""

import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from podfeed.config.logging import setup_logging
from podfeed.config.manager import ConfigManager
from podfeed.config.schema import GlobalConfig
from podfeed.feeds.builder import FeedBuilder
from podfeed.feeds.models import FeedMetadata, MediaFile
from podfeed.publish.publisher import Publisher
from podfeed.utils.errors import ConfigError, PodfeedError, UploadError
from podfeed.utils.retry import RetryConfig

app = typer.Typer(
    name="podfeed",
    help="Build podcast feeds from audio files and publish them to S3",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def _fail(error: PodfeedError) -> None:
    err_console.print(f"[red]✗[/red] {escape(str(error))}")
    if isinstance(error, UploadError) and error.uploaded:
        err_console.print(
            f"[dim]  {len(error.uploaded)} file(s) were uploaded before the failure[/dim]"
        )
    sys.exit(1)


def _manager(ctx: typer.Context) -> ConfigManager:
    if isinstance(ctx.obj, ConfigManager):
        return ctx.obj
    return ConfigManager()


def _collect_paths(files: list[Path]) -> list[MediaFile]:
    """A single directory argument means every file in it; otherwise keep the given order."""
    if len(files) == 1 and files[0].is_dir():
        return MediaFile.from_directory(files[0])
    return MediaFile.from_paths(files)


def _require(value: str | None, option: str, key: str) -> str:
    if not value:
        raise ConfigError(f"Missing {option} (or set it with: podfeed config set {key} <value>)")
    return value


def make_publisher(region: str, container: str, config: GlobalConfig) -> Publisher:
    return Publisher(
        region,
        container,
        retry_config=RetryConfig(max_attempts=config.publish.retry_attempts),
        endpoint_url=config.publish.endpoint_url,
    )


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose (DEBUG) logging"
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file"
    ),
    config_dir: Path | None = typer.Option(
        None, "--config-dir", help="Use this config directory instead of the default"
    ),
) -> None:
    """podfeed - Turn audio files into a podcast feed and publish it."""
    manager = ConfigManager(config_dir=config_dir)
    ctx.obj = manager

    level = "WARNING"
    try:
        level = manager.load_config().log_level
    except PodfeedError:
        # Reported by the command that needs the config
        pass
    setup_logging(verbose=verbose, log_file=log_file, level=level)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from podfeed import __version__

    console.print(f"[bold cyan]podfeed[/bold cyan] v{__version__}")


@app.command("feed")
def feed_command(
    ctx: typer.Context,
    files: list[Path] = typer.Argument(
        ..., help="Audio files in episode order, or a single directory of them"
    ),
    title: str | None = typer.Option(None, "--title", "-t", help="Feed title"),
    region: str | None = typer.Option(None, "--region", "-r", help="AWS region of the bucket"),
    container: str | None = typer.Option(
        None, "--container", "-c", help="Bucket the feed is published to"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Where to write the feed (default: feed.xml)"
    ),
    description: str | None = typer.Option(None, "--description", help="Feed description"),
    image: Path | None = typer.Option(None, "--image", help="Cover art (.jpg or .png)"),
    base_url: str | None = typer.Option(
        None, "--base-url", help="URL the media is served from (default: the bucket URL)"
    ),
    upload: bool = typer.Option(
        False, "--upload", "-u", help="Upload the feed and media after building it"
    ),
) -> None:
    """Build a podcast feed from audio files.

    Episodes keep the order they are given in; the first one is dated today
    and each following one a day earlier. A directory is read in file-name order.

    Examples:
        podfeed feed episodes/ --title "My Show" -r eu-west-1 -c my-show

        podfeed feed a.mp3 b.mp3 --title "My Show" -r eu-west-1 -c my-show --upload
    """
    try:
        config = _manager(ctx).load_config()
        defaults = config.feed

        feed_title = _require(title or defaults.title, "--title", "feed.title")
        output_path = output or defaults.output
        image_path = image or defaults.image

        publisher = None
        if upload or base_url is None:
            publisher = make_publisher(
                _require(region or config.publish.region, "--region", "publish.region"),
                _require(
                    container or config.publish.container, "--container", "publish.container"
                ),
                config,
            )

        metadata = FeedMetadata(
            title=feed_title,
            base_url=base_url or publisher.base_url(),
            description=description or defaults.description,
            image=image_path,
        )
        media = _collect_paths(files)

        FeedBuilder(metadata).write(media, output_path)
        console.print(
            f"[green]✓[/green] Wrote [bold]{escape(str(output_path))}[/bold] "
            f"with {len(media)} episode(s)"
        )

        if upload:
            to_upload = [output_path, *(m.path for m in media)]
            if image_path is not None:
                to_upload.append(image_path)
            result = publisher.upload(to_upload)
            console.print(f"[green]✓[/green] Uploaded {len(result.keys)} file(s)")
            console.print(f"  Feed URL: {escape(publisher.url_for_file(output_path))}")

    except PodfeedError as e:
        _fail(e)


@app.command("upload")
def upload_command(
    ctx: typer.Context,
    files: list[Path] = typer.Argument(..., help="Files to upload, or a single directory"),
    region: str | None = typer.Option(None, "--region", "-r", help="AWS region of the bucket"),
    container: str | None = typer.Option(None, "--container", "-c", help="Bucket name"),
) -> None:
    """Create a public bucket (if needed) and upload files to it.

    Safe to re-run: a bucket you already own is reused.

    Examples:
        podfeed upload feed.xml episodes/*.mp3 -r eu-west-1 -c my-show
    """
    try:
        config = _manager(ctx).load_config()
        publisher = make_publisher(
            _require(region or config.publish.region, "--region", "publish.region"),
            _require(container or config.publish.container, "--container", "publish.container"),
            config,
        )
        paths = [m.path for m in _collect_paths(files)]

        result = publisher.upload(paths)

        table = Table(title=f"[bold]Uploaded to {escape(publisher.container_name)}[/bold]")
        table.add_column("Object", style="cyan", no_wrap=True)
        table.add_column("URL", style="blue")
        for key, url in zip(result.keys, result.urls):
            table.add_row(escape(key), escape(url))
        console.print(table)
        console.print(f"\n[green]✓[/green] Uploaded {len(result.keys)} file(s)")

    except PodfeedError as e:
        _fail(e)


@app.command("config")
def config_command(
    ctx: typer.Context,
    action: str = typer.Argument(..., help="Action: show or set <key> <value>"),
    key: str | None = typer.Argument(None, help="Config key (for 'set' action)"),
    value: str | None = typer.Argument(None, help="Config value (for 'set' action)"),
) -> None:
    """Manage podfeed configuration.

    Actions:
        show: Display current configuration
        set:  Set a configuration value (dotted keys for sections)

    Examples:
        podfeed config show

        podfeed config set publish.region eu-west-1
    """
    try:
        manager = _manager(ctx)

        if action == "show":
            config = manager.load_config()

            console.print("\n[bold]podfeed Configuration[/bold]\n")

            table = Table(show_header=False, box=None)
            table.add_column("Key", style="cyan")
            table.add_column("Value", style="white")

            table.add_row("Config file", escape(str(manager.config_file)))
            table.add_row("", "")
            table.add_row("log_level", config.log_level)
            for section in ("feed", "publish"):
                for name, field_value in getattr(config, section).model_dump(mode="json").items():
                    shown = "—" if field_value is None else str(field_value)
                    table.add_row(f"{section}.{name}", escape(shown))

            console.print(table)

        elif action == "set":
            if not key or value is None:
                err_console.print("[red]✗[/red] Usage: podfeed config set <key> <value>")
                sys.exit(1)

            manager.set_value(key, value)
            console.print(
                f"[green]✓[/green] Set [cyan]{escape(key)}[/cyan] = [yellow]{escape(value)}[/yellow]"
            )

        else:
            err_console.print(f"[red]✗[/red] Unknown action: {escape(action)}")
            err_console.print("Valid actions: show, set")
            sys.exit(1)

    except PodfeedError as e:
        _fail(e)


if __name__ == "__main__":
    app()
