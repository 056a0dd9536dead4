"""Operation data models: raw status records, failures, poll options."""
import json
from dataclasses import dataclass
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, model_validator
from lropoll.config import Settings, get_settings
from lropoll.core.exceptions import UNKNOWN_CODE


def _encode_payload(value: Any) -> Optional[bytes]:
    """Turn a wire payload into raw JSON bytes; absent or empty messages become None."""
    if value is None or value == {}:
        return None
    if isinstance(value, bytes):
        return value
    return json.dumps(value).encode()


@dataclass(frozen=True)
class RawStatus:
    """
    Raw operation status as returned by a status fetcher.

    Payloads stay undecoded; decode hooks turn them into typed values.
    An error_code of 0 means OK.
    """

    done: bool = False
    result: Optional[bytes] = None
    metadata: Optional[bytes] = None
    error_code: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def failed(self) -> bool:
        """True if this status reports a remote failure."""
        if self.error_code is not None:
            return self.error_code != 0
        return bool(self.error_message)

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "RawStatus":
        """
        Build a RawStatus from a JSON operation envelope.

        Args:
            data: {"name", "done", "metadata", "response", "error": {"code", "message"}}

        Returns:
            RawStatus: Parsed status
        """
        error = data.get("error")
        error_code = None
        error_message = None
        if isinstance(error, dict):
            error_code = error.get("code")
            error_message = error.get("message")
        elif error is not None:
            # Non-standard error shape, keep it as the message
            error_message = str(error)

        return cls(
            done=bool(data.get("done", False)),
            result=_encode_payload(data.get("response")),
            metadata=_encode_payload(data.get("metadata")),
            error_code=error_code,
            error_message=error_message,
        )


@dataclass(frozen=True)
class OperationFailure:
    """Remote-reported failure of a finished operation."""

    code: int
    message: str = ""

    @classmethod
    def from_status(cls, status: RawStatus) -> "OperationFailure":
        """Extract the failure from a terminal raw status."""
        code = status.error_code if status.error_code else UNKNOWN_CODE
        return cls(code=code, message=status.error_message or "")


@dataclass
class PollAttempt:
    """
    State of one poll attempt within a poll session.

    Not persisted; lives only inside the poll loop.
    """

    number: int
    elapsed: float
    status: Optional[RawStatus] = None
    transport_error: Optional[Exception] = None


class PollOptions(BaseModel):
    """Backoff and budget configuration for one poll session."""

    initial_delay: float = Field(default=0.5, gt=0)
    max_delay: float = Field(default=45.0, gt=0)
    multiplier: float = Field(default=1.5, gt=1)
    total_timeout: Optional[float] = Field(default=None, gt=0)
    max_attempts: Optional[int] = Field(default=None, ge=1)
    cancel_grace_period: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def check_delays(self) -> "PollOptions":
        """Ensure max_delay is not below initial_delay."""
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must not be smaller than initial_delay")
        return self

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides: Any) -> "PollOptions":
        """
        Build options from settings, with explicit keyword overrides.

        Args:
            settings: Settings to read (defaults to get_settings())
            **overrides: Field values taking precedence over settings

        Returns:
            PollOptions: Validated options
        """
        settings = settings or get_settings()
        values = {
            "initial_delay": settings.LRO_INITIAL_DELAY,
            "max_delay": settings.LRO_MAX_DELAY,
            "multiplier": settings.LRO_MULTIPLIER,
            "total_timeout": settings.LRO_TOTAL_TIMEOUT,
            "max_attempts": settings.LRO_MAX_ATTEMPTS,
            "cancel_grace_period": settings.LRO_CANCEL_GRACE_PERIOD,
        }
        values.update(overrides)
        return cls(**values)
