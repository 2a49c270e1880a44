"""Report sinks for sharewalk.

A report is an append-only table of shared nodes in discovery order plus
three status cells for the operator: when the traversal last ran, how many
invocations it has taken and whether it has finished. A missing row means
"private or not visited yet"; only a finished report is complete.
"""

import csv
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from .config import Classification, CompletionState, NodeKind
from .errors import ReportError

logger = logging.getLogger(__name__)

STATUS_LAST_RUN = "Start time of the last run"
STATUS_INVOCATIONS = "Number of runs"
STATUS_COMPLETION = "Iteration finished"
HEADER_ROW = ["Path", "Type", "Shared"]


@dataclass(frozen=True)
class OutputRecord:
    """One report row: a shared node and where it was found."""
    path: str
    kind: NodeKind
    classification: Classification

    def as_row(self) -> List[str]:
        return [self.path, self.kind.value, self.classification.value]

    @classmethod
    def from_row(cls, row: List[str]) -> 'OutputRecord':
        return cls(row[0], NodeKind(row[1]), Classification(row[2]))


@dataclass
class RunMetadata:
    """Status cells stored alongside the report rows."""
    last_run: datetime
    invocations: int
    completion: CompletionState


class ReportSink(ABC):
    """Append-only row writer with run status cells."""

    @abstractmethod
    def begin_table(self, started_at: datetime) -> None:
        """Start a new table for a fresh traversal.

        Resets the status cells to (started_at, 1, running).
        """
        pass

    @abstractmethod
    def continue_table(self, resumed_at: datetime) -> None:
        """Keep appending to the current table for a resumed traversal.

        Sets last_run to resumed_at, increments the invocation count and
        marks the table running. Falls back to begin_table when there is no
        table to continue.
        """
        pass

    @abstractmethod
    def append(self, record: OutputRecord) -> None:
        pass

    @abstractmethod
    def set_completion(self, state: CompletionState) -> None:
        pass

    @abstractmethod
    def metadata(self) -> Optional[RunMetadata]:
        """Return the current status cells, or None if no table exists."""
        pass


class MemoryReportSink(ReportSink):
    """List-backed sink for tests and for embedding the engine."""

    def __init__(self):
        self.records: List[OutputRecord] = []
        self.archived: List[List[OutputRecord]] = []
        self._metadata: Optional[RunMetadata] = None

    def begin_table(self, started_at: datetime) -> None:
        if self._metadata is not None:
            self.archived.append(self.records)
        self.records = []
        self._metadata = RunMetadata(started_at, 1, CompletionState.RUNNING)

    def continue_table(self, resumed_at: datetime) -> None:
        if self._metadata is None:
            self.begin_table(resumed_at)
            return
        self._metadata = RunMetadata(
            resumed_at, self._metadata.invocations + 1, CompletionState.RUNNING
        )

    def append(self, record: OutputRecord) -> None:
        self.records.append(record)

    def set_completion(self, state: CompletionState) -> None:
        if self._metadata is None:
            raise RuntimeError("No report table to update; call begin_table first")
        self._metadata.completion = state

    def metadata(self) -> Optional[RunMetadata]:
        return self._metadata


class CsvReportSink(ReportSink):
    """CSV report laid out like a spreadsheet sheet.

    Rows 1-3 hold the status cells (label, value), row 4 the header and
    every following row one OutputRecord. Starting a new table moves an
    existing report aside to `<stem>.<n><suffix>` instead of overwriting
    it.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def begin_table(self, started_at: datetime) -> None:
        if self.path.exists():
            archived = self._archive_path()
            logger.info("Move previous report %s to %s", self.path, archived)
            os.replace(self.path, archived)
        else:
            logger.info("Create new report %s", self.path)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._write(RunMetadata(started_at, 1, CompletionState.RUNNING), [])

    def continue_table(self, resumed_at: datetime) -> None:
        current = self.metadata()
        if current is None:
            logger.warning("Report %s missing, starting a new one", self.path)
            self.begin_table(resumed_at)
            return
        logger.info("Use and update report %s from last run", self.path)
        self._update(RunMetadata(resumed_at, current.invocations + 1, CompletionState.RUNNING))

    def append(self, record: OutputRecord) -> None:
        with open(self.path, 'a', newline='', encoding='utf-8') as f:
            csv.writer(f).writerow(record.as_row())

    def set_completion(self, state: CompletionState) -> None:
        current = self.metadata()
        if current is None:
            raise FileNotFoundError(f"Report {self.path} does not exist")
        current.completion = state
        self._update(current)

    def metadata(self) -> Optional[RunMetadata]:
        if not self.path.exists():
            return None
        rows = self._read_rows()
        status = {row[0]: row[1] for row in rows[:3] if len(row) >= 2}
        try:
            return RunMetadata(
                last_run=datetime.fromisoformat(status[STATUS_LAST_RUN]),
                invocations=int(status[STATUS_INVOCATIONS]),
                completion=CompletionState(status[STATUS_COMPLETION]),
            )
        except (KeyError, ValueError) as e:
            raise ReportError(f"Report {self.path} has malformed status rows: {e}") from e

    def records(self) -> List[OutputRecord]:
        """Read back every record row of the current table."""
        if not self.path.exists():
            return []
        return [OutputRecord.from_row(row) for row in self._read_rows()[4:] if row]

    def _read_rows(self) -> List[List[str]]:
        with open(self.path, newline='', encoding='utf-8') as f:
            return list(csv.reader(f))

    def _update(self, metadata: RunMetadata) -> None:
        rows = self._read_rows()[4:]
        self._write(metadata, rows)

    def _write(self, metadata: RunMetadata, rows: List[List[str]]) -> None:
        # Replaced atomically; readers see the old or the new report.
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', newline='', encoding='utf-8') as f:
                writer = csv.writer(f)
                writer.writerow([STATUS_LAST_RUN, metadata.last_run.isoformat()])
                writer.writerow([STATUS_INVOCATIONS, metadata.invocations])
                writer.writerow([STATUS_COMPLETION, metadata.completion.value])
                writer.writerow(HEADER_ROW)
                writer.writerows(rows)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _archive_path(self) -> Path:
        n = 1
        while True:
            candidate = self.path.with_name(f"{self.path.stem}.{n}{self.path.suffix}")
            if not candidate.exists():
                return candidate
            n += 1
