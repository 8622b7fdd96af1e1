"""Third Hand management CLI.

Creates and drops database schemas for all domains, and provisions
administrator accounts (admins cannot self-register).

Usage:
    python src/manage.py setup-db                         # Create all tables
    python src/manage.py drop-db --domain gallery         # Drop one domain's tables
    python src/manage.py create-admin --username curator --email admin@example.com
"""

import argparse
import getpass
import sys

from shared.db import drop_db, setup_db

DOMAIN_NAMES = ["identity", "gallery", "payments", "messaging", "notifications"]


def _domains(names=None):
    from gallery.domain import gallery
    from identity.domain import identity
    from messaging.domain import messaging
    from notifications.domain import notifications
    from payments.domain import payments

    all_domains = {
        "identity": identity,
        "gallery": gallery,
        "payments": payments,
        "messaging": messaging,
        "notifications": notifications,
    }
    return {name: all_domains[name] for name in names} if names else all_domains


def setup_databases(domains=None):
    """Create database schemas for the specified (or all) domains."""
    for name, domain in _domains(domains).items():
        print(f"Initializing {name} domain...")
        domain.init()
        print(f"Creating {name} database schema...")
        setup_db(domain)
        print(f"  {name} schema ready.")

    print("Done.")


def drop_databases(domains=None):
    """Drop database schemas for the specified (or all) domains."""
    for name, domain in _domains(domains).items():
        print(f"Initializing {name} domain...")
        domain.init()
        print(f"Dropping {name} database schema...")
        drop_db(domain)
        print(f"  {name} schema dropped.")

    print("Done.")


def create_admin(username, email, password=None):
    """Provision a verified administrator account."""
    from identity.domain import identity
    from identity.user import security
    from identity.user.registration import ProvisionAdmin

    identity.init()
    password = password or getpass.getpass("Admin password: ")

    with identity.domain_context():
        command = ProvisionAdmin(
            username=username,
            email=email,
            password_hash=security.hash_password(password),
        )
        user_id = identity.process(command, asynchronous=False)

    print(f"Admin {username} created with id {user_id}.")


def main():
    parser = argparse.ArgumentParser(description="Third Hand management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    setup_parser = subparsers.add_parser("setup-db", help="Create all database tables")
    setup_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to set up (default: all)",
    )

    drop_parser = subparsers.add_parser("drop-db", help="Drop all database tables")
    drop_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to drop (default: all)",
    )

    admin_parser = subparsers.add_parser("create-admin", help="Create an administrator account")
    admin_parser.add_argument("--username", required=True)
    admin_parser.add_argument("--email", required=True)
    admin_parser.add_argument("--password", help="Prompted for when omitted")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases(args.domain)
    elif args.command == "drop-db":
        drop_databases(args.domain)
    elif args.command == "create-admin":
        create_admin(args.username, args.email, args.password)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
