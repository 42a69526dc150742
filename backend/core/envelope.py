"""
envelope.py — Uniform response envelope and display rounding.

Every computation returns ``{"success": bool, "data"?: ..., "message"?: str}``.
Rounding happens here, at the response boundary: percentages to whole
numbers, averages to two decimals. Everything upstream keeps full precision.
"""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from core.errors import AnalyticsError
from core.stats import round_half_away

logger = logging.getLogger(__name__)

PERCENT_PRECISION = 0
AVERAGE_PRECISION = 2


@dataclass
class Envelope:
    success: bool
    data: Any = None
    message: Optional[str] = None
    status_code: int = 200

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": self.success}
        if self.success:
            body["data"] = self.data
        if self.message is not None:
            body["message"] = self.message
        return body


def success(data: Any) -> Envelope:
    return Envelope(success=True, data=data)


def failure(error: AnalyticsError) -> Envelope:
    return Envelope(success=False, message=error.message, status_code=error.status_code)


def display_percentage(value):
    return round_half_away(value, PERCENT_PRECISION)


def display_average(value):
    return round_half_away(value, AVERAGE_PRECISION)


def enveloped(func: Callable[..., Any]) -> Callable[..., Envelope]:
    """
    Wrap a computation so it always returns an Envelope. Known failures keep
    their message and status; anything else becomes a generic 500.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Envelope:
        try:
            return success(func(*args, **kwargs))
        except AnalyticsError as exc:
            if exc.status_code >= 500:
                logger.error("%s failed: %s", func.__name__, exc.message)
            else:
                logger.warning("%s rejected: %s", func.__name__, exc.message)
            return failure(exc)
        except Exception:
            logger.exception("%s error", func.__name__)
            return failure(AnalyticsError())

    return wrapper
