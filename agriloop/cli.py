import shutil
from datetime import datetime, timezone
from pathlib import Path

import typer

from . import accounts, config, dashboard, database, orders
from .errors import AgriLoopError

app = typer.Typer(help="AgriLoop admin commands")


@app.command()
def init():
    """Init the database schema"""
    database.init_db()
    typer.echo("Database initialized")


@app.command()
def reset(yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt")):
    """Erase the local sqlite DB (after a timestamped backup) and recreate the schema"""
    url = config.DATABASE_URL
    if not url.startswith("sqlite:///"):
        typer.echo("Reset currently only supports a local sqlite database.")
        raise typer.Exit(code=1)
    if not yes:
        typer.confirm("This will erase your local sqlite DB and recreate schema. Continue?", abort=True)

    path = Path(url.replace("sqlite:///", ""))
    if path.exists():
        backups_dir = path.resolve().parent / "backups"
        backups_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        dest = backups_dir / f"{path.name}.{ts}.bak"
        shutil.copy2(path, dest)
        typer.echo(f"Backup stored at {dest}")
    database.drop_db()
    database.init_db()
    typer.echo("Database reset and schema recreated")


@app.command()
def verify(email: str = typer.Argument(..., help="Email of the user to mark verified")):
    """Mark a user's email as verified without the mailed link"""
    db = database.SessionLocal()
    try:
        user = accounts.mark_verified(db, email)
        typer.echo(f"User {user.id} ({user.email}) is verified")
    except AgriLoopError as e:
        typer.echo(e.message, err=True)
        raise typer.Exit(code=1)
    finally:
        db.close()


@app.command("orders")
def list_orders(
    user_id: int = typer.Argument(..., help="Seller or buyer id"),
    side: str = typer.Option("seller", help="seller or buyer"),
):
    """List orders for a seller or buyer"""
    db = database.SessionLocal()
    try:
        rows = orders.list_orders(db, user_id, side)
    except AgriLoopError as e:
        typer.echo(e.message, err=True)
        raise typer.Exit(code=1)
    finally:
        db.close()
    if not rows:
        typer.echo("No orders found")
        return
    for r in rows:
        typer.echo(f"{r['id']}: {r['name']} {r['weight_kg']}kg {r['amount_paid']:.2f} {r['status'].value} {r['created_at']}")


@app.command("dashboard")
def show_dashboard(
    user_id: int = typer.Argument(..., help="Seller or buyer id"),
    side: str = typer.Option("seller", help="seller or buyer"),
    period: str = typer.Option("all", help="all, today, week or month"),
    listings: bool = typer.Option(False, "--listings", help="Roll up picked-up listings instead of orders"),
):
    """Print dashboard totals"""
    db = database.SessionLocal()
    try:
        if listings:
            totals = dashboard.listing_totals(db, user_id, side, period)
        else:
            totals = dashboard.order_totals(db, user_id, side, period)
    except AgriLoopError as e:
        typer.echo(e.message, err=True)
        raise typer.Exit(code=1)
    finally:
        db.close()
    for key, value in totals.items():
        typer.echo(f"{key}: {value}")
    typer.echo(f"trees_equivalent: {dashboard.impact(totals)['trees_equivalent']}")


if __name__ == "__main__":
    app()
