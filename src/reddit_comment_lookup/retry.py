from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class RetryState:
    attempt: int  # zero-based index of the attempt that is about to run / just ran
    retries: int
    last_error: Optional[BaseException] = None

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.retries


@dataclass(frozen=True)
class RetryDecision:
    retry: bool
    delay: float
    state: RetryState


class RetryPolicy:
    """
    Exponential backoff as a pure state machine.

    After a failed attempt ``n`` (zero-based) the caller waits
    ``base_delay * 2**n`` before attempt ``n + 1``. No wait follows the final
    attempt: the decision is ``retry=False`` and the caller gives up.
    """

    def __init__(self, retries: int = 3, base_delay: float = 1.0):
        if int(retries) < 1:
            raise ValueError(f"retries must be >= 1, got {retries}")
        self.retries = int(retries)
        self.base_delay = float(base_delay)

    def start(self) -> RetryState:
        return RetryState(attempt=0, retries=self.retries)

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt)

    def on_failure(self, state: RetryState, error: BaseException) -> RetryDecision:
        if state.attempt < state.retries - 1:
            return RetryDecision(
                retry=True,
                delay=self.delay_for(state.attempt),
                state=replace(state, attempt=state.attempt + 1, last_error=error),
            )
        return RetryDecision(
            retry=False,
            delay=0.0,
            state=replace(state, attempt=state.retries, last_error=error),
        )
