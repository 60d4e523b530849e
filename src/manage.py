"""Food court database management CLI.

Usage:
    python src/manage.py setup-db                 # Create all tables
    python src/manage.py drop-db                  # Drop all tables
    python src/manage.py seed data/seed.json      # Load restaurants and menus

The seed file format is described in ordering/catalogue/seeding.py.
"""

import argparse
import sys


def setup_database():
    from ordering.domain import ordering
    from ordering.utils.db import setup_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Creating ordering database schema...")
    setup_db(ordering)
    print("Done.")


def drop_database():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Dropping ordering database schema...")
    drop_db(ordering)
    print("Done.")


def seed(path):
    """Load restaurants (with payout accounts) and their menus from a JSON file."""
    from ordering.catalogue.seeding import load_seed_file
    from ordering.domain import ordering

    ordering.init()
    with ordering.domain_context():
        for restaurant in load_seed_file(path):
            payout = "linked" if restaurant.can_receive_transfers else "manual settlement"
            print(f"  {restaurant.name}: payout {payout}")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Food court database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    seed_parser = subparsers.add_parser("seed", help="Load restaurants and menu items from JSON")
    seed_parser.add_argument("path", help="Path to the seed JSON file")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed":
        seed(args.path)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
