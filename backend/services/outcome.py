"""Typed outcome of a provider call.

Fallback-triggering conditions are returned as values instead of being
raised, so the orchestrators branch on ``outcome.status`` rather than
catching exceptions.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Generic, TypeVar

from services.providers import (
    ProviderBadRequestError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    DEGRADED = "degraded"
    FATAL = "fatal"


@dataclass
class Outcome(Generic[T]):
    status: OutcomeStatus
    value: T | None = None
    reason: str = ""
    error: ProviderError | None = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(OutcomeStatus.SUCCESS, value=value)

    @classmethod
    def degraded(cls, reason: str, error: ProviderError | None = None) -> "Outcome[T]":
        return cls(OutcomeStatus.DEGRADED, reason=reason, error=error)

    @classmethod
    def fatal(cls, reason: str, error: ProviderError | None = None) -> "Outcome[T]":
        return cls(OutcomeStatus.FATAL, reason=reason, error=error)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


async def capture(call: Awaitable[T], timeout: float | None = None) -> Outcome[T]:
    """Await a provider call and fold its failure modes into an Outcome.

    Unavailable, quota and timeout errors become DEGRADED. Rejected requests
    become FATAL. Anything else propagates.
    """
    try:
        if timeout is not None:
            value = await asyncio.wait_for(call, timeout=timeout)
        else:
            value = await call
    except asyncio.TimeoutError:
        logger.warning("Provider call timed out after %ss", timeout)
        return Outcome.degraded(
            "timeout", ProviderTimeoutError(f"timed out after {timeout}s")
        )
    except ProviderBadRequestError as e:
        logger.error("Provider rejected request: %s", e)
        return Outcome.fatal(str(e), e)
    except ProviderUnavailableError as e:
        logger.warning("Provider unavailable: %s", e)
        return Outcome.degraded(str(e) or type(e).__name__, e)
    return Outcome.success(value)
