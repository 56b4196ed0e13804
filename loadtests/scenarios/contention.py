"""Contention scenarios for the per-user cart lock.

Many Locust users share a handful of cart owners, so concurrent mutations
on the same cart serialize behind its lock. A 503 (cart busy) is the lock
doing its job and is recorded as a success; any other failure is not.
"""

import random

from locust import HttpUser, constant_pacing, task

from loadtests.data_generators import frame_line
from loadtests.helpers.response import extract_error_detail, is_busy

SHARED_OWNERS = [f"lt-shared-{n}" for n in range(5)]


class SharedCartUser(HttpUser):
    """Hammers a small pool of carts with adds and reads."""

    wait_time = constant_pacing(0.1)

    def _owner(self):
        return random.choice(SHARED_OWNERS)

    @task(3)
    def add_frame(self):
        with self.client.post(
            f"/carts/{self._owner()}/lines",
            json=frame_line(),
            catch_response=True,
            name="[CONTENTION] POST /carts/{user}/lines",
        ) as resp:
            if resp.status_code == 201 or is_busy(resp):
                resp.success()
            else:
                resp.failure(f"{resp.status_code}: {extract_error_detail(resp)}")

    @task(2)
    def read_totals(self):
        with self.client.get(
            f"/carts/{self._owner()}", catch_response=True, name="[CONTENTION] GET /carts/{user}"
        ) as resp:
            if resp.status_code == 200:
                body = resp.json()
                subtotal, fees, total = (int(body[k]) for k in ("subtotal_base", "prescription_fees_total", "grand_total"))
                if subtotal + fees != total:
                    resp.failure(f"Torn breakdown: {subtotal} + {fees} != {total}")
                else:
                    resp.success()
            elif is_busy(resp):
                resp.success()
            else:
                resp.failure(f"{resp.status_code}: {extract_error_detail(resp)}")

    @task(1)
    def clear(self):
        with self.client.post(
            f"/carts/{self._owner()}/clear", catch_response=True, name="[CONTENTION] POST /carts/{user}/clear"
        ) as resp:
            if resp.status_code == 200 or is_busy(resp):
                resp.success()
            else:
                resp.failure(f"{resp.status_code}: {extract_error_detail(resp)}")
