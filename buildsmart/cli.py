"""BuildSmart CLI tool."""

import json
import os
from pathlib import Path
from typing import Optional

import typer

from buildsmart.core.config import settings

app = typer.Typer(name="buildsmart", help="BuildSmart AI CLI")
db_app = typer.Typer(help="Storage management commands")
dev_app = typer.Typer(help="Development-only helpers")
app.add_typer(db_app, name="db")
app.add_typer(dev_app, name="dev")


def _session():
    import httpx
    from buildsmart.client.session import FileStorage, SessionHolder

    http = httpx.Client(base_url=settings.API_URL, timeout=30)
    return SessionHolder(http, FileStorage(settings.SESSION_FILE))


@db_app.command("init")
def db_init():
    """Create tables (SQL backend) or the data directory (JSON backend)."""
    if settings.STORAGE_BACKEND == "sql":
        from buildsmart.db.session import init_db
        init_db()
        typer.echo("✅ Tables created")
    else:
        Path(settings.DATA_DIR).mkdir(parents=True, exist_ok=True)
        typer.echo(f"✅ Data directory ready: {settings.DATA_DIR}")


@db_app.command("seed")
def db_seed(
    password: Optional[str] = typer.Option(None, help="Password for demo users"),
):
    """Provision the four demo users."""
    from buildsmart.repositories import open_store
    from buildsmart.db.seeds.seed_demo_users import seed_demo_users

    store = open_store()
    try:
        created = seed_demo_users(store, password)
    finally:
        store.close()
    typer.echo(f"✅ Demo users seeded ({created} created)")


@db_app.command("reset")
def db_reset():
    """Drop and recreate all storage (DANGER)."""
    confirm = typer.confirm("⚠️  This will DELETE all users and site data. Continue?")
    if not confirm:
        raise typer.Abort()
    if settings.STORAGE_BACKEND == "sql":
        from buildsmart.db.session import drop_db, init_db
        drop_db()
        init_db()
    else:
        for data_file in Path(settings.DATA_DIR).glob("*.json"):
            os.remove(data_file)
    typer.echo("✅ Storage reset")


@app.command("roles")
def list_roles():
    """Show the role catalog."""
    from buildsmart.core.roles import ROLE_DEFINITIONS

    for definition in ROLE_DEFINITIONS.values():
        typer.echo(f"{definition.role.value}: {definition.title}")
        typer.echo(f"  permissions: {', '.join(p.value for p in definition.permissions)}")
        typer.echo(f"  navigation:  {', '.join(definition.navigation_items)}")


@app.command("login")
def login(
    email: str = typer.Argument(..., help="Account email"),
    password: str = typer.Option(..., prompt=True, hide_input=True),
):
    """Sign in and store the session locally."""
    from buildsmart.client.session import AuthClientError

    session = _session()
    try:
        user = session.login(email, password)
    except AuthClientError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"✅ Signed in as {user.name} ({user.role.value})")


@app.command("demo-login")
def demo_login(role: str = typer.Argument("Worker", help="Role to sign in as")):
    """Sign in as a demo user (non-production servers only)."""
    from buildsmart.client.session import AuthClientError

    session = _session()
    try:
        user = session.demo_login(role)
    except AuthClientError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"✅ Signed in as {user.name} ({user.role.value})")


@app.command("whoami")
def whoami():
    """Show the stored identity and what it can reach."""
    session = _session()
    if not session.is_authenticated:
        typer.echo("Not signed in")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(session.user.model_dump(by_alias=True, mode="json"), indent=2))
    typer.echo(f"navigation: {', '.join(session.navigation_items())}")


@app.command("logout")
def logout():
    """Forget the stored session."""
    _session().logout()
    typer.echo("✅ Signed out")


@dev_app.command("preview")
def dev_preview(role: str = typer.Argument(..., help="Role to preview")):
    """Preview a role's navigation and widgets locally (no token issued)."""
    from buildsmart.client.devtools import DevRoleSwitcher, DevToolsDisabledError

    try:
        switcher = DevRoleSwitcher()
    except DevToolsDisabledError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(switcher.preview(role), indent=2))


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Auto-reload"),
):
    """Start the FastAPI server."""
    import uvicorn
    uvicorn.run("buildsmart.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
