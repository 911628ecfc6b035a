"""Management CLI commands."""

import sys

from flask import Flask
from app import create_app, db


def init_db(app: Flask) -> None:
    """Initialize the database and the uploads directories."""
    from app.services.file_storage import FileStorageService

    with app.app_context():
        FileStorageService().ensure_dirs()
        app.logger.info("Database initialized successfully (schema managed by migrations)")


def drop_db(app: Flask, confirm: bool = False) -> None:
    """Drop all database tables."""
    if not confirm:
        response = input("Are you sure you want to drop all tables? [y/N]: ")
        if response.lower() != "y":
            print("Operation cancelled")
            return

    with app.app_context():
        db.drop_all()
        app.logger.info("Database dropped successfully")


def migrate(app: Flask) -> None:
    """Run database migrations."""
    from alembic.config import Config
    from alembic import command

    alembic_cfg = Config("alembic.ini")

    with app.app_context():
        command.upgrade(alembic_cfg, "head")
        print("Migrations completed successfully")


def create_migration(app: Flask, message: str) -> None:
    """Create a new migration."""
    from alembic.config import Config
    from alembic import command

    alembic_cfg = Config("alembic.ini")

    with app.app_context():
        command.revision(alembic_cfg, autogenerate=True, message=message)
        print(f"Migration created with message: {message}")


def stamp_db(app: Flask, revision: str = "head") -> None:
    """Stamp database with a specific migration version without running it."""
    from alembic.config import Config
    from alembic import command

    alembic_cfg = Config("alembic.ini")

    with app.app_context():
        command.stamp(alembic_cfg, revision)
        print(f"Database stamped with revision: {revision}")


def expire_offers(app: Flask, tenant_id: int = None) -> None:
    """Expire SENT offers past their validity date, for one tenant or all."""
    from sqlalchemy import select
    from app.models import Offer, OfferStatus
    from app.services.recruitment_workflow_service import RecruitmentWorkflowService

    with app.app_context():
        if tenant_id is None:
            tenant_ids = db.session.scalars(
                select(Offer.tenant_id).where(Offer.status == OfferStatus.SENT).distinct()
            ).all()
        else:
            tenant_ids = [tenant_id]

        total = 0
        for tid in tenant_ids:
            total += RecruitmentWorkflowService(tenant_id=tid).expire_offers()
        print(f"Expired {total} offers across {len(tenant_ids)} tenants")


if __name__ == "__main__":
    app = create_app()

    commands = {
        "init": lambda: init_db(app),
        "drop": lambda: drop_db(app),
        "migrate": lambda: migrate(app),
        "create-migration": lambda: create_migration(app, sys.argv[2] if len(sys.argv) > 2 else "auto"),
        "stamp": lambda: stamp_db(app, sys.argv[2] if len(sys.argv) > 2 else "head"),
        "expire-offers": lambda: expire_offers(app, int(sys.argv[2]) if len(sys.argv) > 2 else None),
    }

    if len(sys.argv) < 2:
        print("Usage: python manage.py <command>")
        print("\nCommands:")
        print("  init                - Initialize database and uploads directories")
        print("  drop                - Drop all tables")
        print("  migrate             - Run migrations")
        print("  create-migration    - Create new migration")
        print("  stamp               - Mark database as at specific revision")
        print("                        Usage: stamp [revision] (default: head)")
        print("  expire-offers       - Expire SENT offers past their validity date")
        print("                        Usage: expire-offers [tenant_id]")
        sys.exit(1)

    command = sys.argv[1]

    if command not in commands:
        print(f"Unknown command: {command}")
        sys.exit(1)

    commands[command]()
