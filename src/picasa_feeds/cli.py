"""CLI interface for picasa-feeds.

Commands:
    setup   - Store an AuthSub token and default options
    albums  - List a user's albums
    photos  - List the photos in an album
    recent  - List a user's recently uploaded photos
    search  - Search photos
    status  - Show the current configuration
"""

import sys
from pathlib import Path

import click

from .config import (
    CONFIG_FILE,
    AppConfig,
    config_exists,
    load_config,
    save_config,
)
from .logging_config import setup_logging


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--config", type=click.Path(), default=None, help="Config file path")
@click.pass_context
def main(ctx, verbose, config):
    """Picasa Web Albums feed browser."""
    setup_logging(debug=verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else CONFIG_FILE


def _config(ctx) -> AppConfig:
    config_path = ctx.obj["config_path"]
    if not config_exists(config_path):
        return AppConfig()
    try:
        return load_config(config_path)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _client(config: AppConfig):
    # Lazy import so --help stays fast
    from .client import PicasaClient

    return PicasaClient(token=config.token, base_url=config.base_url)


def _pages(client, feed, all_pages: bool, max_pages: int):
    if not all_pages:
        return [feed]
    return client.iter_pages(feed, max_pages=max_pages)


def _echo_photo(photo, thumb: str | None) -> None:
    url = photo.url(thumb) if thumb else photo.url()
    size = f"{photo.width}x{photo.height}" if photo.width and photo.height else "?"
    click.echo(f"{photo.title or '(untitled)'}\t{size}\t{url or '-'}")


@main.command()
@click.pass_context
def setup(ctx):
    """Store an AuthSub token and default feed options."""
    from .client import authorization_url

    config_path = ctx.obj["config_path"]
    click.echo("Picasa Feeds — Setup")
    click.echo("=" * 40)
    click.echo()
    click.echo("To read private albums you need an AuthSub session token.")
    click.echo("Grant access here, then copy the token from the redirect URL:")
    click.echo(f"  {authorization_url('http://localhost/')}")
    click.echo()
    click.echo("Press Enter to skip and only read public feeds.")
    token = click.prompt("token", default="", show_default=False, hide_input=True)
    user = click.prompt("default user", default="default")
    thumbsize = click.prompt(
        "thumbnail sizes (e.g. 72c,160c)", default="", show_default=False
    )

    config = AppConfig(token=token or None, user=user, thumbsize=thumbsize or None)
    save_config(config, config_path)
    click.echo(f"\nConfig saved to {config_path}")


@main.command()
@click.argument("user", required=False)
@click.option("--all-pages", is_flag=True, help="Follow 'next' links")
@click.option("--max-pages", default=50, help="Maximum pages to fetch")
@click.pass_context
def albums(ctx, user, all_pages, max_pages):
    """List the albums of USER (default: configured user)."""
    from .errors import PicasaError

    config = _config(ctx)
    try:
        with _client(config) as client:
            feed = client.user(user or config.user, config.feed_options())
            for page in _pages(client, feed, all_pages, max_pages):
                for album in page.albums():
                    count = album.numphotos if album.numphotos is not None else "?"
                    click.echo(f"{album.gphoto_id}\t{count}\t{album.title}")
    except PicasaError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("album_id")
@click.option("--user", default=None, help="Album owner (default: configured user)")
@click.option("--thumb", default=None, help="Print this thumbnail size, e.g. 160c")
@click.option("--all-pages", is_flag=True, help="Follow 'next' links")
@click.option("--max-pages", default=50, help="Maximum pages to fetch")
@click.pass_context
def photos(ctx, album_id, user, thumb, all_pages, max_pages):
    """List the photos of ALBUM_ID (an album id or feed URL)."""
    from .errors import PicasaError

    config = _config(ctx)
    options = config.feed_options()
    if thumb:
        options["thumbsize"] = thumb
    try:
        with _client(config) as client:
            feed = client.album(album_id, options, user_id=user or config.user)
            for page in _pages(client, feed, all_pages, max_pages):
                for photo in page.photos():
                    _echo_photo(photo, thumb)
    except PicasaError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("user", required=False)
@click.option("--thumb", default=None, help="Print this thumbnail size, e.g. 160c")
@click.pass_context
def recent(ctx, user, thumb):
    """List the recently uploaded photos of USER."""
    from .errors import PicasaError

    config = _config(ctx)
    options = config.feed_options()
    if thumb:
        options["thumbsize"] = thumb
    try:
        with _client(config) as client:
            feed = client.recent_photos(user or config.user, options)
            for photo in feed.photos():
                _echo_photo(photo, thumb)
    except PicasaError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("query")
@click.option("--user", default=None, help="Only search this user's photos")
@click.option("--thumb", default=None, help="Print this thumbnail size, e.g. 160c")
@click.pass_context
def search(ctx, query, user, thumb):
    """Search photos matching QUERY."""
    from .errors import PicasaError

    config = _config(ctx)
    options = config.feed_options()
    if thumb:
        options["thumbsize"] = thumb
    try:
        with _client(config) as client:
            results = client.search(query, options, user_id=user)
            click.echo(f"{results.total_results or 0} matching photos", err=True)
            for photo in results.photos():
                _echo_photo(photo, thumb)
    except PicasaError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.pass_context
def status(ctx):
    """Show the current configuration."""
    config_path = ctx.obj["config_path"]
    has_config = config_exists(config_path)

    click.echo("Picasa Feeds — Status")
    click.echo("=" * 40)
    click.echo(f"Config: {'Found' if has_config else 'Not configured'} ({config_path})")

    config = _config(ctx)
    click.echo(f"Authenticated: {'yes' if config.token else 'no (public feeds only)'}")
    click.echo(f"Default user: {config.user}")
    if config.thumbsize:
        click.echo(f"Thumbnail sizes: {config.thumbsize}")

    if not has_config:
        click.echo("\nRun 'picasa-feeds setup' to store a token.")
