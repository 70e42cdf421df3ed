from typing import Optional

from pydantic import BaseModel


class ProbeOutcome(BaseModel):
    """
    Data model representing the result of a single endpoint probe.

    ``url`` is the ledger identity; ``latency`` is in seconds.
    """

    url: str
    name: str
    success: bool
    latency: float
    status_code: Optional[int] = None
    error: Optional[str] = None
