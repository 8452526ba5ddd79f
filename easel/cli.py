"""CLI commands for Easel."""

import asyncio

import click


@click.group()
@click.version_option(package_name="easel")
def cli():
    """Easel - gallery image storage on Cloudinary with a database fallback."""
    pass


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8080, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", default=1, type=int, help="Number of worker processes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging level",
)
def serve(host, port, reload, workers, log_level):
    """Run the Easel server."""
    import signal

    from hypercorn.asyncio import serve as hypercorn_serve
    from hypercorn.config import Config

    config = Config()
    config.application_path = "easel.asgi:app"
    config.bind = [f"{host}:{port}"]
    config.workers = 1 if reload else workers
    config.loglevel = log_level.upper()
    config.include_server_header = False

    if reload:
        config.use_reloader = True
        from hypercorn.run import run
        run(config)
        return

    from easel.asgi import app

    shutdown_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_event.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_event.set)
    try:
        loop.run_until_complete(
            hypercorn_serve(app, config, shutdown_trigger=shutdown_event.wait)
        )
    finally:
        loop.close()


def _build_gateway():
    """Create a gateway plus the engine it runs on, outside the web app."""
    from easel.db.session import create_db_config
    from easel.config import get_settings
    from easel.lib.storage import MediaGateway

    settings = get_settings()
    db_config = create_db_config(settings)
    return MediaGateway(settings.media, db_config.create_session_maker()), db_config


@cli.command()
@click.argument("file_ids", nargs=-1, type=int, required=True)
@click.option("--category", default=None, help="Override the stored image category")
def migrate(file_ids, category):
    """Copy database-stored images to Cloudinary."""

    async def _run() -> int:
        gateway, db_config = _build_gateway()
        failures = 0
        try:
            for file_id in file_ids:
                result = await gateway.migrate(file_id, category)
                if not result.success:
                    failures += 1
                    click.echo(f"{file_id}: failed - {result.error}", err=True)
                elif result.already_migrated:
                    click.echo(f"{file_id}: already migrated to {result.url}")
                else:
                    click.echo(f"{file_id}: migrated to {result.url}")
        finally:
            await db_config.get_engine().dispose()
        return failures

    if asyncio.run(_run()):
        raise SystemExit(1)


@cli.command()
@click.option("--file-id", default=None, type=int, help="Only purge this file")
def cleanup(file_id):
    """Drop database bytes of images already migrated to Cloudinary."""

    async def _run() -> int:
        gateway, db_config = _build_gateway()
        try:
            return await gateway.cleanup_migrated(file_id)
        finally:
            await db_config.get_engine().dispose()

    purged = asyncio.run(_run())
    click.echo(f"Purged stored bytes of {purged} file(s)")


if __name__ == "__main__":
    cli()
