"""Dashboard error model - Pure data structures.

Feed failures and map rendering failures are independent domains.
Shell components report them as values; nothing here raises.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Coarse failure domain."""
    FEED = "feed"
    RENDER = "render"


@dataclass(frozen=True)
class DashboardError:
    """A user-facing failure.

    Attributes:
        category: Which failure domain produced the error
        message: Human-readable description
    """
    category: ErrorCategory
    message: str

    def to_dict(self) -> dict[str, str]:
        """Serialize for API responses."""
        return {
            "category": self.category.value,
            "message": self.message,
        }
