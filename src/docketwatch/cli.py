from __future__ import annotations

import json
import logging
from typing import Optional

import typer

from docketwatch.config import Settings
from docketwatch.monitor import AlertDestinationMissing, DocketMonitor
from docketwatch.notify import LogNotifier, Notifier, ResendNotifier, SmtpNotifier
from docketwatch.postback import PostbackClient
from docketwatch.site import CourtSite, extract_internal_id
from docketwatch.storage import ALERT_EMAIL_KEY, DocketStore, DuplicateCaseError, create_session_factory, init_db
from docketwatch.transport import BrowserTransport, TransportError

app = typer.Typer(help="Court docket monitor: track cases and e-mail new docket entries")


@app.callback()
def configure_logging(verbose: bool = typer.Option(False, "--verbose", "-v")) -> None:
    level = logging.DEBUG if verbose else Settings().log_level.upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")


def _open_store(settings: Settings, db_url: Optional[str]) -> DocketStore:
    session_factory, engine = create_session_factory(db_url or settings.database_url)
    init_db(engine)
    return DocketStore(session_factory)


def _transport(settings: Settings) -> BrowserTransport:
    return BrowserTransport(timeout=settings.request_timeout, user_agent=settings.user_agent)


def _build_notifier(settings: Settings, dry_run: bool) -> Notifier:
    if dry_run or settings.notifier == "log":
        return LogNotifier()
    if settings.notifier == "smtp":
        if not settings.smtp_host:
            raise typer.BadParameter("DOCKETWATCH_SMTP_HOST is required for the smtp notifier")
        return SmtpNotifier(
            settings.smtp_host,
            settings.alert_from,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
        )
    if not settings.resend_api_key:
        raise typer.BadParameter("DOCKETWATCH_RESEND_API_KEY is required (or use --dry-run)")
    return ResendNotifier(settings.resend_api_key, settings.alert_from, base_url=settings.resend_api_url)


@app.command("check")
def check(
    db_url: Optional[str] = typer.Option(None, envvar="DOCKETWATCH_DATABASE_URL"),
    alert_email: Optional[str] = typer.Option(None, help="Override the stored alert address"),
    attachment_limit: Optional[int] = typer.Option(
        None,
        min=0,
        help="Max PDF downloads per case per cycle (defaults to DOCKETWATCH_ATTACHMENT_LIMIT)",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log alerts instead of sending them"),
) -> None:
    """Run one check cycle over every tracked case."""

    settings = Settings()
    store = _open_store(settings, db_url)
    notifier = _build_notifier(settings, dry_run)

    with _transport(settings) as transport:
        site = CourtSite(transport, settings.base_url)
        monitor = DocketMonitor(
            site,
            PostbackClient(site, timeout=settings.attachment_timeout),
            store,
            notifier,
            attachment_limit=attachment_limit if attachment_limit is not None else settings.attachment_limit,
            default_alert_email=settings.alert_email,
        )
        try:
            summary = monitor.run(alert_email)
        except AlertDestinationMissing as exc:
            typer.echo(f"ERROR: {exc}. Set one with `docketwatch alert-email you@example.com`.", err=True)
            raise typer.Exit(code=2) from exc
        finally:
            close = getattr(notifier, "close", None)
            if close is not None:
                close()

    typer.echo(json.dumps(summary.as_dict(), indent=2))


@app.command("add")
def add_case(
    case_url: str = typer.Argument(..., help="Case URL, e.g. https://pch.tncourts.gov/CaseDetails.aspx?id=30247"),
    db_url: Optional[str] = typer.Option(None, envvar="DOCKETWATCH_DATABASE_URL"),
) -> None:
    """Validate a case against the site and start tracking it."""

    settings = Settings()
    store = _open_store(settings, db_url)
    with _transport(settings) as transport:
        try:
            identity = CourtSite(transport, settings.base_url).lookup_case(case_url)
        except TransportError as exc:
            typer.echo(f"ERROR: Scraper error: {exc}", err=True)
            raise typer.Exit(code=1) from exc

    if identity is None:
        typer.echo(
            "ERROR: Could not find a valid case. Paste the full case URL "
            "(e.g. https://pch.tncourts.gov/CaseDetails.aspx?id=30247).",
            err=True,
        )
        raise typer.Exit(code=1)

    try:
        record = store.add_case(identity)
    except DuplicateCaseError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Tracking {record.case_number} ({record.case_name or 'unnamed'}) as id={record.id}")


@app.command("remove")
def remove_case(
    case_id: int = typer.Argument(..., help="Tracked case id as shown by `cases`"),
    db_url: Optional[str] = typer.Option(None, envvar="DOCKETWATCH_DATABASE_URL"),
) -> None:
    store = _open_store(Settings(), db_url)
    if not store.remove_case(case_id):
        typer.echo(f"ERROR: No tracked case with id={case_id}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Removed case id={case_id}")


@app.command("cases")
def list_cases(db_url: Optional[str] = typer.Option(None, envvar="DOCKETWATCH_DATABASE_URL")) -> None:
    store = _open_store(Settings(), db_url)
    for record in store.list_cases():
        typer.echo(f"{record.id}\t{record.case_number}\t{record.case_name or ''}\t{record.case_url or ''}")


@app.command("alerts")
def list_alerts(
    limit: int = typer.Option(20, min=1, help="Number of alerts to show"),
    db_url: Optional[str] = typer.Option(None, envvar="DOCKETWATCH_DATABASE_URL"),
) -> None:
    store = _open_store(Settings(), db_url)
    for alert in store.recent_alerts(limit):
        typer.echo(f"{alert.sent_at.isoformat()}\t{alert.case_number}\t{alert.entries_count} new")


@app.command("alert-email")
def alert_email(
    email: Optional[str] = typer.Argument(None, help="Address to set; omit to show the current one"),
    db_url: Optional[str] = typer.Option(None, envvar="DOCKETWATCH_DATABASE_URL"),
) -> None:
    store = _open_store(Settings(), db_url)
    if email is None:
        typer.echo(store.get_setting(ALERT_EMAIL_KEY) or "")
        return
    email = email.strip()
    if not email or "@" not in email:
        raise typer.BadParameter("Valid email is required")
    store.set_setting(ALERT_EMAIL_KEY, email)
    typer.echo(f"Alerts will be sent to {email}")


@app.command("probe")
def probe(case_ref: str = typer.Argument(..., help="Case URL or internal id")) -> None:
    """Fetch a case page and report whether the site served real content or a block page."""

    internal_id = extract_internal_id(case_ref)
    if internal_id is None:
        raise typer.BadParameter("Expected a case URL containing id=<number> or a bare id")
    settings = Settings()
    with _transport(settings) as transport:
        report = CourtSite(transport, settings.base_url).probe(internal_id)
    typer.echo(json.dumps(report, indent=2))


if __name__ == "__main__":
    app()
