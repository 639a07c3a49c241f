"""Bounded retry for operations that settle shortly after a state change."""
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from lxcpilot.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def retry_call(
    operation: Callable[[], T],
    max_attempts: int = 3,
    delay: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    retry_if: Optional[Callable[[T], bool]] = None,
    name: Optional[str] = None,
) -> T:
    """Call ``operation`` until it succeeds or attempts run out.

    An attempt is retried when it raises one of ``exceptions`` or when
    ``retry_if`` returns True for its result. The delay between attempts is
    fixed.

    Args:
        operation: Zero-argument callable to invoke
        max_attempts: Maximum number of attempts (at least 1)
        delay: Seconds to sleep between attempts
        exceptions: Exception types treated as transient
        retry_if: Predicate marking a result as "not ready yet"
        name: Label used in log messages (defaults to the callable's name)

    Returns:
        The first accepted result, or the last result if every attempt
        produced a retryable one. Callers decide what an unready final
        result means.

    Raises:
        The last transient exception once attempts are exhausted; any other
        exception immediately.

    Example:
        ip = retry_call(strategy.resolve, max_attempts=10, delay=3,
                        exceptions=(ExecuteError,), retry_if=lambda ip: ip is None)
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    label = name or getattr(operation, "__name__", repr(operation))

    for attempt in range(1, max_attempts + 1):
        try:
            result = operation()
        except exceptions as e:
            if attempt == max_attempts:
                logger.error(f"{label} failed after {max_attempts} attempts: {e}")
                raise
            logger.warning(f"{label} failed (attempt {attempt}/{max_attempts}): {e}")
        else:
            if retry_if is None or not retry_if(result):
                return result
            if attempt == max_attempts:
                logger.error(f"{label} not ready after {max_attempts} attempts")
                return result
            logger.debug(f"{label} not ready (attempt {attempt}/{max_attempts})")

        logger.debug(f"Retrying in {delay:.1f}s...")
        time.sleep(delay)
