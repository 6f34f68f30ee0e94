"""Category service management CLI.

Creates and drops the SQL schema used by the production overlay, and prints
the current category tree.

Usage:
    python src/manage.py setup-db     # Create category and product tables
    python src/manage.py drop-db      # Drop them
    python src/manage.py show-tree    # Print the category hierarchy
"""

import argparse
import sys


def _domain():
    from hierarchy.domain import hierarchy

    hierarchy.init()
    return hierarchy


def setup_database():
    from hierarchy.utils.db import setup_db

    domain = _domain()
    print("Creating hierarchy database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from hierarchy.utils.db import drop_db

    domain = _domain()
    print("Dropping hierarchy database schema...")
    drop_db(domain)
    print("Done.")


def render_tree(nodes, indent=0):
    lines = []
    for node in nodes:
        view = node.category
        lines.append(f"{'  ' * indent}{view.name} ({view.product_count} products)")
        lines.extend(render_tree(node.children, indent + 1))
    return lines


def show_tree():
    from hierarchy.category.queries import get_category_hierarchy

    domain = _domain()
    with domain.domain_context():
        lines = render_tree(get_category_hierarchy())
    print("\n".join(lines) if lines else "(no categories)")


def main():
    parser = argparse.ArgumentParser(description="Hardware store category management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("show-tree", help="Print the category hierarchy")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "show-tree":
        show_tree()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
