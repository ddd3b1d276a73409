"""CLI entry point for s3docs.

This module exposes each storage operation as a command. Connection
settings come from the environment (see s3docs.core.config.Settings).

Usage:
    # Pre-signed URLs
    python -m s3docs upload-url <bucket> <key> --expires-in 300
    python -m s3docs download-url <bucket> <key> --version-id <id>

    # Folders and documents
    python -m s3docs create-folder <bucket> <folder>
    python -m s3docs delete-folder <bucket> <folder>
    python -m s3docs delete-document <bucket> <folder> <key>
    python -m s3docs delete-version <bucket> <folder> <key> <version_id>

Examples:
    S3_ENDPOINT_URL=http://localhost:9000 python -m s3docs create-folder docs reports
    python -m s3docs version-id docs reports/2024.pdf
"""

import asyncio
import logging
import sys
from typing import Any, Awaitable, Callable, Optional

import click
from botocore.exceptions import BotoCoreError
from pydantic import ValidationError

from s3docs import __version__
from s3docs.core.config import Settings
from s3docs.core.errors import StorageError
from s3docs.storage.s3_client import S3Storage

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def run_operation(operation: Callable[[S3Storage], Awaitable[Any]]) -> Any:
    """Build a facade from the environment and run one operation on it.

    Exits with status 1 when settings are invalid or the operation fails.

    Args:
        operation: Coroutine function receiving the facade

    Returns:
        The operation's result
    """
    try:
        settings = Settings()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)
    try:
        storage = S3Storage.from_settings(settings)
    except (ValueError, BotoCoreError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    try:
        return asyncio.run(operation(storage))
    except ValueError as e:
        raise click.UsageError(str(e))
    except StorageError as e:
        logger.error(e.message)
        for key in e.failed_keys:
            logger.error(f"Not deleted: {key}")
        sys.exit(1)


@click.group()
def cli() -> None:
    """s3docs - folders, versions and pre-signed URLs on S3-compatible storage."""
    pass


@cli.command("upload-url")
@click.argument("bucket")
@click.argument("key")
@click.option(
    "--expires-in",
    "-e",
    type=int,
    default=None,
    help="URL lifetime in seconds (default: PRESIGN_EXPIRES_IN)",
)
def upload_url(bucket: str, key: str, expires_in: Optional[int]) -> None:
    """Print a pre-signed PUT URL for KEY in BUCKET."""
    url = run_operation(lambda s: s.generate_upload_url(bucket, key, expires_in))
    click.echo(url)


@cli.command("download-url")
@click.argument("bucket")
@click.argument("key")
@click.option(
    "--expires-in",
    "-e",
    type=int,
    default=None,
    help="URL lifetime in seconds (default: PRESIGN_EXPIRES_IN)",
)
@click.option(
    "--version-id",
    "-v",
    default=None,
    help="Pin the URL to this object version",
)
def download_url(
    bucket: str, key: str, expires_in: Optional[int], version_id: Optional[str]
) -> None:
    """Print a pre-signed GET URL for KEY in BUCKET."""
    url = run_operation(
        lambda s: s.generate_download_url(bucket, key, expires_in, version_id)
    )
    click.echo(url)


@cli.command("version-id")
@click.argument("bucket")
@click.argument("key")
def version_id(bucket: str, key: str) -> None:
    """Print the current version ID of KEY in BUCKET."""
    result = run_operation(lambda s: s.get_version_id(bucket, key))
    if result is None:
        logger.warning(f"{bucket} is not versioned")
    else:
        click.echo(result)


@cli.command("create-folder")
@click.argument("bucket")
@click.argument("folder")
def create_folder(bucket: str, folder: str) -> None:
    """Create FOLDER in BUCKET."""
    run_operation(lambda s: s.create_folder(bucket, folder))
    click.echo(f"Created folder {folder}")


@cli.command("delete-folder")
@click.argument("bucket")
@click.argument("folder")
def delete_folder(bucket: str, folder: str) -> None:
    """Delete FOLDER and everything in it from BUCKET."""
    run_operation(lambda s: s.delete_folder(bucket, folder))
    click.echo(f"Deleted folder {folder}")


@cli.command("delete-document")
@click.argument("bucket")
@click.argument("folder")
@click.argument("key")
def delete_document(bucket: str, folder: str, key: str) -> None:
    """Delete document KEY from FOLDER in BUCKET."""
    run_operation(lambda s: s.delete_document(bucket, folder, key))
    click.echo(f"Deleted document {folder}/{key}")


@cli.command("delete-version")
@click.argument("bucket")
@click.argument("folder")
@click.argument("key")
@click.argument("version_id")
def delete_version(bucket: str, folder: str, key: str, version_id: str) -> None:
    """Delete one VERSION_ID of document KEY in FOLDER."""
    run_operation(
        lambda s: s.delete_document_version(bucket, folder, key, version_id)
    )
    click.echo(f"Deleted version {version_id} of {folder}/{key}")


@cli.command()
def version() -> None:
    """Show version information."""
    print(f"s3docs v{__version__}")


if __name__ == "__main__":
    cli()
