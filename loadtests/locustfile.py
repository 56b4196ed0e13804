"""Eyecart Load Testing: Locust entry point.

Discovers all user classes from the scenarios package. The server must be
started with the seed catalog so the journeys have products to buy:

    CATALOG_SEED_FILE=loadtests/catalog_seed.json uvicorn app:app --app-dir src

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Storefront traffic only:
    locust -f loadtests/locustfile.py CartShopperUser

    # Lock contention:
    locust -f loadtests/locustfile.py SharedCartUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py CartShopperUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.cart import CartShopperUser  # noqa: F401
from loadtests.scenarios.contention import SharedCartUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Fires globally for all scenarios, so the log shows "line_not_found: Cart
    line ... not found" instead of just "404".
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400 and response.status_code != 503:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(**_kwargs):
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}\n")
