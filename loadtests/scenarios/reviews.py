"""Reviews load test scenarios.

Two stateful SequentialTaskSet journeys: a reader paging through a product's
reviews, and a reviewer that reads the newest page before submitting. Stale
submissions (409) are expected under concurrency and counted, not failed.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import product_name, review_payload
from loadtests.helpers.response import extract_error_detail, is_stale_submission
from loadtests.helpers.state import BrowserState, ReviewerState


def _newest_created_at(items: list[dict]) -> str | None:
    return max((item["createdAt"] for item in items), default=None)


class ReviewPagingJourney(SequentialTaskSet):
    """First page -> next page -> next page, following continuation tokens."""

    def on_start(self):
        self.state = BrowserState(product_name=product_name())

    def _read_page(self):
        params = {"pageSize": 10}
        if self.state.continuation_token:
            params["continuationToken"] = self.state.continuation_token
        with self.client.get(
            f"/reviews/{self.state.product_name}",
            params=params,
            catch_response=True,
            name="GET /reviews/{product}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List reviews failed: {extract_error_detail(resp)}")
                self.interrupt()
                return
            self.state.pages_read += 1
            self.state.continuation_token = resp.json()["continuationToken"]

    @task
    def first_page(self):
        self._read_page()

    @task
    def second_page(self):
        if self.state.continuation_token:
            self._read_page()

    @task
    def third_page(self):
        if self.state.continuation_token:
            self._read_page()
        self.interrupt()


class ReviewSubmissionJourney(SequentialTaskSet):
    """Read newest page -> submit -> submit again with the same snapshot.

    The second submission reuses the now-outdated last-seen timestamp, so it
    exercises the conflict path whenever another user wrote in between.
    """

    def on_start(self):
        self.state = ReviewerState(product_name=product_name())

    @task
    def read_latest(self):
        with self.client.get(
            f"/reviews/{self.state.product_name}",
            params={"pageSize": 50},
            catch_response=True,
            name="GET /reviews/{product}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List reviews failed: {extract_error_detail(resp)}")
                self.interrupt()
                return
            self.state.last_seen = _newest_created_at(resp.json()["items"])

    def _submit(self):
        with self.client.post(
            f"/reviews/{self.state.product_name}",
            json=review_payload(self.state.last_seen),
            catch_response=True,
            name="POST /reviews/{product}",
        ) as resp:
            if resp.status_code == 200:
                body = resp.json()
                self.state.submitted_row_keys.append(body["rowKey"])
                self.state.last_seen = body["createdAt"]
            elif is_stale_submission(resp):
                self.state.conflicts += 1
                resp.success()
            else:
                resp.failure(f"Submit review failed: {extract_error_detail(resp)}")

    @task
    def submit_review(self):
        self._submit()

    @task
    def submit_follow_up(self):
        self._submit()
        self.interrupt()


class ReviewsUser(HttpUser):
    """Read-heavy review traffic: four paging readers per reviewer."""

    wait_time = between(0.5, 2.0)
    tasks = {ReviewPagingJourney: 4, ReviewSubmissionJourney: 1}


class ReviewAdminUser(HttpUser):
    """Occasional export and archival of a random product."""

    wait_time = between(5.0, 15.0)
    weight = 1

    @task(3)
    def export_reviews(self):
        with self.client.get(
            f"/reviews/admin/export/{product_name()}",
            catch_response=True,
            name="GET /reviews/admin/export/{product}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Export failed: {extract_error_detail(resp)}")

    @task(1)
    def archive_reviews(self):
        with self.client.post(
            f"/reviews/admin/archive/{product_name()}",
            catch_response=True,
            name="POST /reviews/admin/archive/{product}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Archive failed: {extract_error_detail(resp)}")
