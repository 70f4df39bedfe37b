import click
from flask import current_app

from school_library.extensions import db
from school_library.models.tenant import Tenant
from school_library.services.auth_service import AuthService
from school_library.utils.errors import LibraryError
from school_library.utils.permissions import ROLE_PERMISSIONS, SUPER_ADMIN


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create every table that does not exist yet."""
        db.create_all()
        click.echo("Tables created.")

    @app.cli.command("create-tenant")
    @click.argument("name")
    def create_tenant(name):
        tenant = Tenant(name=name)
        db.session.add(tenant)
        db.session.commit()
        click.echo(f"Tenant #{tenant.id} created: {tenant.name}")

    @app.cli.command("create-user")
    @click.option("--tenant-id", type=int, required=True)
    @click.option("--email", required=True)
    @click.option("--password", required=True)
    @click.option("--first-name", required=True)
    @click.option("--last-name", default="")
    @click.option(
        "--role",
        type=click.Choice(sorted(ROLE_PERMISSIONS) + [SUPER_ADMIN]),
        default="student",
        show_default=True,
    )
    def create_user(tenant_id, email, password, first_name, last_name, role):
        if not db.session.get(Tenant, tenant_id):
            raise click.ClickException(f"Tenant #{tenant_id} not found")
        try:
            user = AuthService.register(tenant_id, email, password, first_name, last_name, role)
        except LibraryError as e:
            raise click.ClickException(e.message)
        current_app.logger.info(f"[cli] user={user.id} tenant={tenant_id} role={role} created")
        click.echo(f"User #{user.id} created: {user.email} ({user.role})")
