from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, List, Optional, Sequence, TypeVar

from edgetrans.errors import EdgeTransError

C = TypeVar("C")
T = TypeVar("T")


@dataclass(frozen=True)
class Attempt:
    candidate: str
    error: str


class AllCandidatesFailed(EdgeTransError):
    def __init__(self, attempts: Sequence[Attempt]) -> None:
        self.attempts = tuple(attempts)
        tried = ", ".join(f"{a.candidate} ({a.error})" for a in self.attempts) or "none"
        super().__init__(f"all candidates failed: {tried}")

    @property
    def candidates(self) -> List[str]:
        return [a.candidate for a in self.attempts]


@dataclass(frozen=True)
class ProbeResult(Generic[T]):
    candidate: str
    value: T
    attempts: tuple


def first_success(
    candidates: Iterable[C],
    attempt: Callable[[C], T],
    *,
    on_failure: Optional[Callable[[C, Exception], None]] = None,
) -> ProbeResult[T]:
    """
    Call `attempt` on each candidate in order and return the first value.
    Candidates after the first success are never tried. Any Exception raised by
    `attempt` marks the candidate as failed.
    """
    failed: List[Attempt] = []
    for candidate in candidates:
        try:
            value = attempt(candidate)
        except Exception as e:
            failed.append(Attempt(candidate=str(candidate), error=str(e) or type(e).__name__))
            if on_failure is not None:
                on_failure(candidate, e)
            continue
        return ProbeResult(candidate=str(candidate), value=value, attempts=tuple(failed))
    raise AllCandidatesFailed(failed)
