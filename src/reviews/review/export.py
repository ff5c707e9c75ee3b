"""CSV export of a product's reviews (admin)."""

import csv
import io
from collections.abc import Iterable

from reviews.review.model import Review

CSV_HEADER = ["CreatedAt", "Text"]


def export_filename(product_name: str) -> str:
    return f"{product_name}_reviews.csv"


def reviews_to_csv(reviews: Iterable[Review]) -> str:
    """Render reviews newest first.

    The header line is bare; every data field is quoted, quotes doubled.
    """
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for review in sorted(reviews, key=lambda r: r.created_at, reverse=True):
        writer.writerow([review.created_at.isoformat(), review.text])
    return buffer.getvalue()
