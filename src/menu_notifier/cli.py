"""CLI entry point for menu notifier."""

import asyncio
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

import typer

from menu_notifier.adapters.notifications import SlackNotifier
from menu_notifier.adapters.sources import create_source
from menu_notifier.adapters.storage import YamlDeliveryLedger, YamlItemStore
from menu_notifier.config import Settings, get_settings
from menu_notifier.core import DeliveryOutcome, DeliveryStatus
from menu_notifier.scheduler import WeeklyScheduler
from menu_notifier.use_cases import (
    CurrentItemService,
    DeliveryOrchestrator,
    DirectSendService,
    RefreshService,
)

cli = typer.Typer(help="Deliver the weekly cafeteria menu from Kakao to Slack.")


@dataclass
class Services:
    """Wired use cases for one process."""
    settings: Settings
    item_store: YamlItemStore
    ledger: YamlDeliveryLedger
    orchestrator: DeliveryOrchestrator
    current: CurrentItemService
    direct_send: DirectSendService
    refresh: RefreshService


def build_services(settings: Settings) -> Services:
    """Construct adapters and use cases from settings."""
    tz = ZoneInfo(settings.schedule.timezone)

    def clock() -> datetime:
        return datetime.now(tz)

    anchor = settings.period.anchor_weekday
    source = create_source(
        settings.source.kind,
        channel_url=settings.source.channel_url,
        timeout=settings.source.timeout,
    )
    notifier = SlackNotifier(
        settings.slack.bot_token,
        channel_link=settings.source.channel_url,
        timeout=settings.slack.timeout,
    )
    item_store = YamlItemStore(settings.data_dir, anchor_weekday=anchor, clock=clock)
    ledger = YamlDeliveryLedger(settings.data_dir)

    return Services(
        settings=settings,
        item_store=item_store,
        ledger=ledger,
        orchestrator=DeliveryOrchestrator(
            source, notifier, item_store, ledger, anchor_weekday=anchor, clock=clock
        ),
        current=CurrentItemService(source, notifier, item_store, anchor_weekday=anchor, clock=clock),
        direct_send=DirectSendService(notifier, ledger, clock=clock),
        refresh=RefreshService(source, item_store),
    )


@cli.callback()
def main(
    ctx: typer.Context,
    config: Path = typer.Option(Path("config.yaml"), "--config", help="Path to YAML config"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Load settings and configure logging for every command."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = get_settings(config)
    settings.validate()

    missing = settings.missing_required()
    if missing:
        print(f"⚠️  Missing settings: {', '.join(missing)}", file=sys.stderr)

    ctx.obj = settings


def _channel(settings: Settings, channel: Optional[str]) -> str:
    destination = channel or settings.slack.channel_id
    if not destination:
        print("❌ No Slack channel: pass --channel or set SLACK_CHANNEL_ID", file=sys.stderr)
        raise typer.Exit(code=1)
    return destination


def _print_outcome(outcome: DeliveryOutcome) -> None:
    icons = {
        DeliveryStatus.DELIVERED: "✅",
        DeliveryStatus.SKIPPED_DUPLICATE: "⏭️ ",
        DeliveryStatus.SKIPPED_NOT_FOUND: "🔍",
        DeliveryStatus.EXHAUSTED: "⌛",
        DeliveryStatus.FAILED: "❌",
    }
    print(f"{icons[outcome.status]} {outcome.status.value} (attempts: {outcome.attempt_count})")
    if outcome.item:
        print(f"  • Item: {outcome.item.title} [{outcome.item.id}]")
    if outcome.delivered_at:
        print(f"  • Delivered at: {outcome.delivered_at.isoformat()}")
    if outcome.reason:
        print(f"  • {outcome.reason}")


@cli.command("check-and-send")
def check_and_send(
    ctx: typer.Context,
    channel: Optional[str] = typer.Option(None, "--channel", help="Slack channel id"),
    max_attempts: Optional[int] = typer.Option(None, "--max-attempts", min=0),
    delay_minutes: Optional[float] = typer.Option(None, "--delay-minutes", min=0),
) -> None:
    """Poll for this week's menu and deliver it once."""
    settings: Settings = ctx.obj
    destination = _channel(settings, channel)
    services = build_services(settings)

    attempts = settings.schedule.max_attempts if max_attempts is None else max_attempts
    delay = settings.retry_delay if delay_minutes is None else timedelta(minutes=delay_minutes)

    outcome = asyncio.run(services.orchestrator.check_and_send(destination, attempts, delay))
    _print_outcome(outcome)
    if outcome.status == DeliveryStatus.FAILED:
        raise typer.Exit(code=1)


@cli.command("current")
def current(
    ctx: typer.Context,
    requester: str = typer.Option(..., "--requester", help="Slack user id to show the menu to"),
    channel: Optional[str] = typer.Option(None, "--channel", help="Slack channel id"),
) -> None:
    """Show this week's menu privately to one user."""
    settings: Settings = ctx.obj
    destination = _channel(settings, channel)
    services = build_services(settings)

    result = asyncio.run(services.current.get_current(destination, requester))
    if result.is_error:
        print(f"❌ {result.error.code}: {result.error}")
        raise typer.Exit(code=1)

    found = result.value
    label = "💾 from cache" if found.source == "cache" else "🔄 freshly fetched"
    print(f"✅ {found.item.title} ({label})")
    print(f"  • {found.item.media_url}")


@cli.command("send")
def send(
    ctx: typer.Context,
    channel: Optional[str] = typer.Option(None, "--channel", help="Slack channel id"),
    force_refresh: bool = typer.Option(False, "--force-refresh", help="Re-store the fetched item"),
) -> None:
    """Fetch the latest menu and send it now, unless already sent."""
    settings: Settings = ctx.obj
    destination = _channel(settings, channel)
    services = build_services(settings)

    async def run():
        refreshed = await services.refresh.refresh(force=force_refresh)
        if refreshed.is_error:
            return refreshed
        return await services.direct_send.send(refreshed.value.item, destination)

    result = asyncio.run(run())
    if result.is_error:
        print(f"❌ {result.error.code}: {result.error}")
        raise typer.Exit(code=1)

    print(f"✅ Sent {result.value.record.item_id} to {result.value.record.destination}")
    print(f"  • Message ts: {result.value.receipt.message_ts}")


@cli.command("refresh")
def refresh(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Store even if already known"),
) -> None:
    """Fetch the latest menu and store it."""
    services = build_services(ctx.obj)

    result = asyncio.run(services.refresh.refresh(force=force))
    if result.is_error:
        print(f"❌ {result.error.code}: {result.error}")
        raise typer.Exit(code=1)

    item = result.value.item
    print(f"{'🆕' if result.value.is_new else '💾'} {item.title} [{item.id}]")
    print(f"  • Published: {item.published_at.isoformat()}")
    print(f"  • Image: {item.media_url}")


@cli.command("status")
def status(
    ctx: typer.Context,
    channel: Optional[str] = typer.Option(None, "--channel", help="Slack channel id"),
) -> None:
    """Show the stored latest menu and the last delivery to a channel."""
    settings: Settings = ctx.obj
    destination = _channel(settings, channel)
    services = build_services(settings)

    latest = services.item_store.find_most_recent()
    current_item = services.item_store.find_current_period()
    last = services.ledger.find_latest_by_destination(destination)

    print(f"📦 Latest stored: {latest.title if latest else '-'}")
    print(f"📅 This week: {current_item.title if current_item else '-'}")
    if last:
        print(f"📨 Last delivery to {destination}: {last.item_id} at {last.delivered_at.isoformat()}")
    else:
        print(f"📨 Nothing delivered to {destination} yet")


@cli.command("schedule")
def schedule(
    ctx: typer.Context,
    channel: Optional[str] = typer.Option(None, "--channel", help="Slack channel id"),
    run_now: bool = typer.Option(False, "--run-now", help="Run the job once with a single attempt and exit"),
) -> None:
    """Run the weekly scheduler until interrupted, or the job once with --run-now."""
    settings: Settings = ctx.obj
    destination = _channel(settings, channel)
    services = build_services(settings)
    scheduler = WeeklyScheduler(
        services.orchestrator,
        destination,
        cron=settings.schedule.cron,
        timezone=settings.schedule.timezone,
        max_attempts=settings.schedule.max_attempts,
        delay=settings.retry_delay,
    )

    if run_now:
        outcome = asyncio.run(scheduler.run_now())
        _print_outcome(outcome)
        if outcome.status == DeliveryStatus.FAILED:
            raise typer.Exit(code=1)
        return

    async def run_forever() -> None:
        scheduler.start()
        print(f"⏰ Scheduler running ({settings.schedule.cron}, {settings.schedule.timezone})")
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.shutdown()

    try:
        asyncio.run(run_forever())
    except KeyboardInterrupt:
        print("\n👋 Stopped")


def app() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    app()
