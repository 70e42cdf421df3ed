import math
from typing import Optional

from pydantic import BaseModel


class AvailabilityRecord(BaseModel):
    """
    Cumulative probe statistics for one URL.

    Latency fields are in seconds and only cover successful probes.
    ``min_latency`` and ``max_latency`` stay None until the first success.
    """

    success_count: int = 0
    failure_count: int = 0
    total_latency: float = 0.0
    min_latency: Optional[float] = None
    max_latency: Optional[float] = None

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count

    @property
    def average_latency(self) -> Optional[float]:
        if self.success_count == 0:
            return None
        return self.total_latency / self.success_count

    def availability_percent(self) -> Optional[int]:
        """
        Rounded (half up) percentage of successful probes, or None without data.
        """
        if self.total == 0:
            return None
        return int(math.floor(100 * self.success_count / self.total + 0.5))
