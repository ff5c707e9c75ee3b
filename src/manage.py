"""Product Reviews maintenance CLI.

Runs the admin operations outside the HTTP server, e.g. from a cron job or
Kubernetes CronJob, against the store selected by REVIEWS_STORE.

Usage:
    python src/manage.py archive Widget Gadget        # Archive old reviews
    python src/manage.py archive Widget --as-of 2025-01-01T00:00:00+00:00
    python src/manage.py export Widget -o widget.csv  # Export reviews as CSV
"""

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path

from reviews.config import get_settings
from reviews.review.export import reviews_to_csv
from reviews.review.service import ReviewService
from reviews.store import get_store


def _service() -> ReviewService:
    settings = get_settings()
    if settings.store_backend == "protean":
        from reviews.domain import reviews

        reviews.init()
    return ReviewService(get_store(), settings)


async def archive_products(products, as_of=None):
    """Archive old reviews for each product; return {product: archived_count}."""
    service = _service()
    results = {}
    for product in products:
        results[product] = await service.archive_old(product, as_of=as_of)
    return results


async def export_product(product):
    reviews = await _service().list_all(product)
    return reviews_to_csv(reviews)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Product Reviews maintenance")
    parser.add_argument("--quiet", action="store_true", help="Skip logging configuration")
    subparsers = parser.add_subparsers(dest="command", required=True)

    archive_parser = subparsers.add_parser("archive", help="Move old reviews into the archive partition")
    archive_parser.add_argument("products", nargs="+", help="Product name(s) to archive")
    archive_parser.add_argument(
        "--as-of",
        type=datetime.fromisoformat,
        help="Reference time for the retention window (default: now, UTC)",
    )

    export_parser = subparsers.add_parser("export", help="Export a product's reviews as CSV")
    export_parser.add_argument("product", help="Product name to export")
    export_parser.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")

    args = parser.parse_args(argv)

    if not args.quiet:
        from reviews.utils.logging import configure_logging

        configure_logging()

    if args.command == "archive":
        results = asyncio.run(archive_products(args.products, as_of=args.as_of))
        for product, count in results.items():
            print(f"{product}: archived {count} review(s)")
    elif args.command == "export":
        csv_text = asyncio.run(export_product(args.product))
        if args.output:
            args.output.write_text(csv_text, encoding="utf-8")
            print(f"Wrote {args.output}")
        else:
            sys.stdout.write(csv_text)
    else:
        parser.print_help()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
