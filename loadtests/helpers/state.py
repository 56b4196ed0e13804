"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state, nothing is shared across
users. State tracks ids returned by creation endpoints so follow-up
operations can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class CartState:
    """Tracks one simulated customer's cart."""

    user_id: str | None = None
    frame_line_id: str | None = None
    lens_line_id: str | None = None
    line_ids: list[str] = field(default_factory=list)


@dataclass
class ProfileState:
    """Tracks one simulated customer's saved prescriptions."""

    profile_ids: list[str] = field(default_factory=list)
