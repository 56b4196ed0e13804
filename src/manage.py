"""Eyecart database management CLI.

Creates and drops the SQL tables behind carts and prescription profiles when
domain.toml points the default provider at sqlite or postgresql. The memory
provider needs neither.

Usage:
    python src/manage.py setup-db
    python src/manage.py drop-db
"""

import argparse
import sys


def setup_database():
    from eyecart.domain import eyecart
    from eyecart.utils.db import setup_db

    print("Initializing eyecart domain...")
    eyecart.init()
    print("Creating eyecart database schema...")
    setup_db(eyecart)
    print("Done.")


def drop_database():
    from eyecart.domain import eyecart
    from eyecart.utils.db import drop_db

    print("Initializing eyecart domain...")
    eyecart.init()
    print("Dropping eyecart database schema...")
    drop_db(eyecart)
    print("Done.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Eyecart database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
