"""Ranked result view and aggregate progress derived from a batch."""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from .models import BatchItem, ItemStatus

ORDERS = ("submission", "score")


@dataclass
class ResultRow:
    """One row of the results table."""
    item_id: str
    file_name: str
    candidate_name: str
    match_score: Union[int, float]
    analysis: str
    rank: Optional[int] = None
    failed: bool = False


@dataclass
class BatchProgress:
    total: int
    completed: int
    failed: int
    in_flight: int
    ready: int

    @property
    def finished(self) -> int:
        return self.completed + self.failed

    @property
    def percent(self) -> int:
        if not self.total:
            return 0
        return round(self.finished * 100 / self.total)


def _row(item: BatchItem) -> ResultRow:
    if item.status is ItemStatus.FAILED:
        return ResultRow(
            item_id=item.id,
            file_name=item.name,
            candidate_name=item.name,
            match_score=0,
            analysis=item.error or "",
            failed=True,
        )
    result = item.result
    score = result.matchScore if result.matchScore is not None else 0
    return ResultRow(
        item_id=item.id,
        file_name=item.name,
        candidate_name=result.candidateName or item.name,
        match_score=score,
        analysis=result.analysis or "",
    )


def project_results(items: Iterable[BatchItem], order: str = "submission") -> List[ResultRow]:
    """Build the results table from the terminal items of a batch.

    Completed items are ranked by position (submission order) or by score
    when ``order="score"``. Failed items are listed unranked after the
    ranking when sorting by score, in place otherwise.
    """
    if order not in ORDERS:
        raise ValueError(f"Unknown order {order!r}, expected one of {ORDERS}")
    rows = [_row(item) for item in items if item.status.is_terminal]
    if order == "score":
        ranked = sorted((r for r in rows if not r.failed), key=lambda r: -r.match_score)
        rows = ranked + [r for r in rows if r.failed]
    rank = 0
    for row in rows:
        if not row.failed:
            rank += 1
            row.rank = rank
    return rows


def batch_progress(items: Iterable[BatchItem]) -> BatchProgress:
    counts = {status: 0 for status in ItemStatus}
    for item in items:
        counts[item.status] += 1
    return BatchProgress(
        total=sum(counts.values()),
        completed=counts[ItemStatus.COMPLETED],
        failed=counts[ItemStatus.FAILED],
        in_flight=counts[ItemStatus.READING] + counts[ItemStatus.SCORING],
        ready=counts[ItemStatus.READY],
    )
