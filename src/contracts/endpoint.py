from typing import Dict
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EndpointDescriptor(BaseModel):
    """
    Data model representing one HTTP endpoint to probe.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    method: str = "GET"
    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"not a valid http(s) URL: {value!r}")
        return value

    @field_validator("method", mode="before")
    @classmethod
    def _normalize_method(cls, value):
        if value is None or value == "":
            return "GET"
        return str(value).upper()

    @field_validator("headers", mode="before")
    @classmethod
    def _default_headers(cls, value):
        if value is None:
            return {}
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value

    @property
    def domain(self) -> str:
        """
        Network location of the URL, e.g. "api.example.com:8080".
        """
        return urlparse(self.url).netloc

    def __repr__(self):
        return f"EndpointDescriptor(name={self.name}, url={self.url}, method={self.method})"
