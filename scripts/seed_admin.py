"""Seed an administrator account through the regular signup flow."""

from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app import create_app, init_database
from services import ConflictError
from services.context import get_services

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass123"


def main() -> None:
    app = create_app()
    init_database(app)
    with app.app_context():
        services = get_services()
        try:
            provisioned = services.provisioning.register(
                "admin",
                credentials={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
                attributes={"twoFactorEnabled": False},
                access_code=app.config["ADMIN_ACCESS_CODE"],
            )
        except ConflictError:
            print(f"Admin user already exists: {ADMIN_EMAIL}")
            return
        print(f"Admin user created: {ADMIN_EMAIL} (id={provisioned.account.id})")


if __name__ == "__main__":
    main()
