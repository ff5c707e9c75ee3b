"""Faker-based data generators for Locust load test scenarios.

Payloads match the camelCase field names of the Reviews API request schema
and stay inside its validation rules (1-500 characters of review text).
"""

import random
import uuid

from faker import Faker

fake = Faker()

# A small catalogue keeps partitions hot enough for submissions to conflict
PRODUCT_NAMES = [f"LoadTest-{i:02d}" for i in range(20)]

EPOCH = "1970-01-01T00:00:00+00:00"


def product_name() -> str:
    return random.choice(PRODUCT_NAMES)


def review_text() -> str:
    """Between one and five sentences, clipped to the 500-character limit."""
    return fake.paragraph(nb_sentences=random.randint(1, 5))[:500]


def request_id() -> str:
    return f"LT-{uuid.uuid4().hex}"


def review_payload(last_seen: str | None, with_request_id: bool = True) -> dict:
    """Generate a SubmitReviewRequest payload.

    ``last_seen`` is the newest createdAt the simulated client has read, or
    None for a product it has never seen reviews for.
    """
    payload = {
        "text": review_text(),
        "lastSeenReviewTimestamp": last_seen or EPOCH,
    }
    if with_request_id:
        payload["requestId"] = request_id()
    return payload
