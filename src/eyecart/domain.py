"""Eyecart bounded context: cart pricing and prescription composition.

Owns a customer's in-progress cart: snapshotted line prices, prescription
attachments (none, inline, or a saved profile), and the authoritative price
breakdown consumed at checkout.
"""

from protean.domain import Domain

from eyecart.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

eyecart = Domain(name="eyecart")
