"""Command-line interface for MailBridge.

This module provides the CLI commands for running the API server,
initializing the database, ingesting inbound mail and sending test email.
"""

import asyncio
import sys
from typing import NoReturn

import click

from mailbridge import __version__
from mailbridge.core.config import get_settings
from mailbridge.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="MailBridge")
def cli() -> None:
    """MailBridge - inbound email queue with token-authenticated access.

    Settings are read from MAILBRIDGE_* environment variables or a .env file.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the MailBridge API server."""
    import uvicorn

    settings = get_settings()
    bind_host = host or settings.host
    bind_port = port or settings.port

    configure_logging(settings)
    logger = get_logger(__name__)
    logger.info(
        "Starting MailBridge server",
        host=bind_host,
        port=bind_port,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "mailbridge.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command("init-db")
def init_db() -> None:
    """Create any missing database tables."""
    from mailbridge.infrastructure.persistence.database import close_database, init_database

    configure_logging(get_settings())

    async def initialize():
        try:
            await init_database()
            click.echo("Database initialized successfully.")
        finally:
            await close_database()

    asyncio.run(initialize())


@cli.command()
@click.argument("source", type=click.File("rb"), default="-")
@click.option(
    "--recipient",
    type=str,
    default=None,
    help="Envelope recipient (defaults to Delivered-To, X-Original-To, then To)",
)
def ingest(source, recipient: str | None) -> None:
    """Store one raw RFC 822 message read from SOURCE (default: stdin).

    Intended for MTA pipe delivery. Exits with status 1 if the message was
    not accepted.
    """
    from mailbridge.application.services import InboundEmailService
    from mailbridge.infrastructure.persistence.database import (
        close_database,
        get_db_manager,
        init_database,
    )

    settings = get_settings()
    configure_logging(settings)
    raw = source.read()

    async def run() -> bool:
        try:
            await init_database()
            async with get_db_manager().session() as session:
                service = InboundEmailService(session, settings.mail_domain)
                message = service.parse_raw(raw, recipient=recipient)
                if not service.validate_email(message):
                    click.echo(f"Rejected: invalid sender or recipient {message.to_address!r}", err=True)
                    return False
                return await service.handle_incoming_email(message)
        finally:
            await close_database()

    if not asyncio.run(run()):
        raise SystemExit(1)
    click.echo("Message stored.")


@cli.command("send-test-email")
@click.argument("to")
@click.option("--subject", default="Test Email from MailBridge", help="Subject line")
@click.option(
    "--message",
    default="This is a test email sent from the MailBridge service.",
    help="Plain text body",
)
def send_test_email(to: str, subject: str, message: str) -> None:
    """Send a test email to TO through the configured provider."""
    from mailbridge.domain.entities import OutboundEmail
    from mailbridge.infrastructure.services import EmailService, create_email_service

    settings = get_settings()
    configure_logging(settings)

    if not EmailService.validate_email_address(to):
        click.echo("Error: Invalid email format", err=True)
        raise SystemExit(1)

    service = create_email_service(settings)
    result = asyncio.run(
        service.send_email(
            OutboundEmail(
                from_address=settings.email_from,
                to=[to],
                subject=subject,
                text=message,
                tags=[{"name": "type", "value": "test"}],
            )
        )
    )

    if not result.success:
        click.echo(f"Error: {result.error}", err=True)
        raise SystemExit(1)
    click.echo(f"Email sent to {to}, id: {result.message_id}")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `mailbridge` command is run
    or when using `python -m mailbridge`.
    """
    cli()
    sys.exit(0)


if __name__ == "__main__":
    main()
