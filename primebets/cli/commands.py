"""PrimeBets CLI: Typer-based command-line interface."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from primebets import __version__

app = typer.Typer(
    name="primebets",
    help="primebets - sports-betting advisor with scheduled automations",
    no_args_is_help=True,
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"primebets v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=_version_callback, is_eager=True
    ),
) -> None:
    """primebets - sports-betting advisor with scheduled automations."""


def _runtime():
    from primebets.core.config.loader import load_config
    from primebets.runtime import build_runtime

    return build_runtime(load_config())


def _fmt(dt) -> str:
    return dt.strftime("%Y-%m-%d %H:%M") if dt else "-"


# ════════════════════════════════════════════════════════════
# run: start API server
# ════════════════════════════════════════════════════════════


@app.command()
def run(
    port: int | None = typer.Option(None, "--port", "-p", help="Port number"),
    host: str | None = typer.Option(None, "--host", "-h", help="Host address"),
) -> None:
    """Start the API server (uvicorn) with the automation scheduler."""
    import uvicorn

    from primebets.api.app import create_app
    from primebets.core.config.loader import load_config

    overrides = {"api": {k: v for k, v in {"host": host, "port": port}.items() if v is not None}}
    config = load_config(overrides=overrides)

    console.print(
        f"[green]Starting primebets API on {config.api.host}:{config.api.port}[/green]"
    )
    uvicorn.run(create_app(config), host=config.api.host, port=config.api.port)


# ════════════════════════════════════════════════════════════
# status: config + store info
# ════════════════════════════════════════════════════════════


@app.command()
def status() -> None:
    """Show configuration and store status."""
    rt = _runtime()
    subs = rt.ledger.list_all()
    now = rt.clock.now()

    table = Table(title="primebets status")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Version", __version__)
    table.add_row("Timezone", rt.config.app.timezone)
    table.add_row("DB Path", rt.config.database.path)
    table.add_row("Users", str(len(rt.users.list_ids())))
    table.add_row("Premium", str(sum(1 for s in subs if rt.ledger.is_premium(s.user_id))))
    table.add_row("Subscriptions", str(len(subs)))
    table.add_row("Push", "enabled" if rt.config.push_enabled else "disabled")
    table.add_row("Now", _fmt(now))

    console.print(table)


# ════════════════════════════════════════════════════════════
# automations: job control (sub-command group)
# ════════════════════════════════════════════════════════════

automations_app = typer.Typer(help="Manage automation jobs")
app.add_typer(automations_app, name="automations")


@automations_app.command("list")
def automations_list() -> None:
    """List automations with their effective config and last run."""
    from primebets.core.scheduler.scheduler import STATE_KEY

    rt = _runtime()
    state = rt.store.get_json(STATE_KEY) or {}

    table = Table(title="Automations")
    table.add_column("Name", style="cyan")
    table.add_column("Enabled", style="green")
    table.add_column("Schedule", style="yellow")
    table.add_column("Last run", style="blue")
    table.add_column("Runs", style="white")
    table.add_column("Failures", style="red")

    for name, cfg in rt.automations.config.all().items():
        if cfg.time:
            schedule = f"{cfg.day_of_week or 'daily'} {cfg.time}"
        else:
            schedule = f"every {cfg.interval_minutes}min"
        meta = state.get(name, {}) if isinstance(state, dict) else {}
        table.add_row(
            name,
            str(cfg.enabled),
            schedule,
            (meta.get("last_run_at") or "-")[:16],
            str(meta.get("run_count", 0)),
            str(meta.get("failure_count", 0)),
        )

    console.print(table)


@automations_app.command("run")
def automations_run(
    name: str = typer.Argument(help="Automation name (e.g. premium-checks)"),
) -> None:
    """Execute one automation once, now."""
    rt = _runtime()
    if name not in rt.automations.names():
        console.print(f"[red]Unknown automation:[/red] {name}")
        raise typer.Exit(code=1)

    async def _run_once() -> bool:
        rt.automations.initialize_all()
        task = rt.automations.run_now(name)
        if task is None:
            return False
        await task
        await rt.notifications.drain()
        return True

    if not asyncio.run(_run_once()):
        console.print(f"[yellow]Automation is disabled:[/yellow] {name}")
        raise typer.Exit(code=1)

    job = rt.scheduler.get(name)
    if job.last_error:
        console.print(f"[red]{name} failed:[/red] {job.last_error}")
        raise typer.Exit(code=1)
    console.print(f"[green]Ran {name}[/green] in {job.last_duration_ms}ms")


def _set_enabled(name: str, enabled: bool) -> None:
    from primebets.core.errors import UnknownAutomationError

    rt = _runtime()
    try:
        rt.automations.config.update(name, {"enabled": enabled})
    except UnknownAutomationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    state = "enabled" if enabled else "disabled"
    console.print(f"[green]{name} {state}[/green] (applies on next server start)")


@automations_app.command("enable")
def automations_enable(name: str = typer.Argument(help="Automation name")) -> None:
    """Enable an automation."""
    _set_enabled(name, True)


@automations_app.command("disable")
def automations_disable(name: str = typer.Argument(help="Automation name")) -> None:
    """Disable an automation."""
    _set_enabled(name, False)


@automations_app.command("reset")
def automations_reset() -> None:
    """Drop runtime overrides and restore the configured defaults."""
    rt = _runtime()
    rt.automations.config.reset()
    console.print("[green]Automation config reset to defaults[/green]")


# ════════════════════════════════════════════════════════════
# user: user management (sub-command group)
# ════════════════════════════════════════════════════════════

user_app = typer.Typer(help="Manage users")
app.add_typer(user_app, name="user")


@user_app.command("add")
def user_add(
    user_id: str = typer.Argument(help="User ID (e.g. 'ana')"),
    name: str = typer.Option(..., "--name", "-n", help="Display name"),
    email: str | None = typer.Option(None, "--email", "-e", help="Email address"),
) -> None:
    """Register a user."""
    from primebets.core.errors import ValidationError

    rt = _runtime()
    if rt.users.get(user_id):
        console.print(f"[yellow]User already exists:[/yellow] {user_id}")
        return
    try:
        rt.users.register(user_id, name, email)
    except ValidationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]User created:[/green] {user_id}")


@user_app.command("list")
def user_list() -> None:
    """List users with their premium status."""
    rt = _runtime()
    users = rt.users.list()
    if not users:
        console.print("[dim]No users found.[/dim]")
        return

    table = Table(title="Users")
    table.add_column("User ID", style="cyan")
    table.add_column("Name", style="blue")
    table.add_column("Email", style="white")
    table.add_column("Premium", style="green")
    table.add_column("Created", style="dim")

    for u in users:
        table.add_row(
            u.user_id,
            u.name,
            u.email or "-",
            str(rt.ledger.is_premium(u.user_id)),
            _fmt(u.created_at),
        )

    console.print(table)


# ════════════════════════════════════════════════════════════
# subscription: premium ledger (sub-command group)
# ════════════════════════════════════════════════════════════

subscription_app = typer.Typer(help="Manage premium subscriptions")
app.add_typer(subscription_app, name="subscription")


@subscription_app.command("show")
def subscription_show(user_id: str = typer.Argument(help="User ID")) -> None:
    """Show a user's subscription."""
    rt = _runtime()
    sub = rt.ledger.get(user_id)
    if sub is None:
        console.print(f"[dim]No subscription for {user_id}.[/dim]")
        return

    table = Table(title=f"Subscription: {user_id}")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Plan", sub.plan)
    table.add_row("Status", sub.status)
    table.add_row("Expires", _fmt(sub.expires_at))
    table.add_row("Days remaining", str(rt.ledger.days_remaining(user_id)))
    table.add_row("Auto-renew", str(sub.auto_renew))
    table.add_row("Reminders sent", ", ".join(map(str, sub.reminders_sent)) or "-")
    console.print(table)


@subscription_app.command("create")
def subscription_create(
    user_id: str = typer.Argument(help="User ID"),
    plan: str = typer.Option("monthly", "--plan", "-p", help="monthly | quarterly | yearly"),
    no_auto_renew: bool = typer.Option(False, "--no-auto-renew", help="Disable auto-renewal"),
) -> None:
    """Grant a subscription without charging (admin)."""
    from primebets.services.subscriptions import PLAN_MONTHS

    if plan not in PLAN_MONTHS:
        console.print(f"[red]Unknown plan:[/red] {plan}")
        raise typer.Exit(code=1)
    rt = _runtime()
    sub = rt.ledger.create(user_id, plan, auto_renew=not no_auto_renew)
    console.print(f"[green]Subscription created:[/green] {user_id} until {_fmt(sub.expires_at)}")


@subscription_app.command("cancel")
def subscription_cancel(user_id: str = typer.Argument(help="User ID")) -> None:
    """Cancel auto-renewal; access stays until expiry."""
    rt = _runtime()
    if rt.ledger.cancel(user_id):
        console.print(f"[green]Subscription cancelled:[/green] {user_id}")
    else:
        console.print(f"[red]No subscription:[/red] {user_id}")
        raise typer.Exit(code=1)


# ════════════════════════════════════════════════════════════
# notifications
# ════════════════════════════════════════════════════════════

notifications_app = typer.Typer(help="Inspect notifications")
app.add_typer(notifications_app, name="notifications")


@notifications_app.command("list")
def notifications_list(
    user_id: str = typer.Argument(help="User ID"),
    unread: bool = typer.Option(False, "--unread", "-u", help="Only unread"),
    limit: int = typer.Option(20, "--limit", "-l", help="Max rows"),
) -> None:
    """List a user's notifications, newest first."""
    rt = _runtime()
    items = rt.notifications.list_unread(user_id) if unread else rt.notifications.list(user_id)
    if not items:
        console.print("[dim]No notifications.[/dim]")
        return

    table = Table(title=f"Notifications: {user_id}")
    table.add_column("When", style="dim")
    table.add_column("Type", style="yellow")
    table.add_column("Title", style="cyan")
    table.add_column("Read", style="green")

    for n in items[:limit]:
        table.add_row(_fmt(n.created_at), n.type, n.title, "✓" if n.read else "")

    console.print(table)
