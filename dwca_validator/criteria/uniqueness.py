"""
Uniqueness criterion (bounded-memory duplicate detection).

Values of the designated field (or the record id) are buffered in memory and
spilled to a private temporary file. Once the stream ends the spill file is
sorted on disk and scanned once: every line equal to its predecessor is a
duplicate. Results are only produced during finalization.

A value shared by K records yields K-1 results, each naming the shared value.
Values are escaped so that embedded line terminators keep one value per
spill line, and spill files tolerate lone surrogates.
"""

import uuid
from pathlib import Path
from typing import List, Optional, Tuple

import structlog

from dwca_validator.config import Settings, settings as default_settings
from dwca_validator.criteria.base import StreamCriterion
from dwca_validator.exceptions import CriterionConfigurationError
from dwca_validator.messages import format_message
from dwca_validator.record import Record
from dwca_validator.result.accumulator import ResultAccumulator, accumulate_or_raise
from dwca_validator.result.types import (
    AggregationResult, EvaluationContext, Severity, ValidationResult,
    ValidationResultElement, ValidationType
)
from dwca_validator.sorting import FILE_ENCODING, FILE_ERRORS, case_insensitive, external_sort, iter_lines

logger = structlog.get_logger(__name__)

FILE_EXT = ".txt"
SORTED_SUFFIX = "_sorted"
RECORD_ID_LABEL = "id"

# Spill-file failures that degrade the check instead of aborting the chain
SPILL_ERRORS = (OSError, UnicodeError)

ESCAPE = "\\"
ESCAPED_TERMINATOR = ESCAPE + "n"


def escape_value(value: str, terminator: str) -> str:
    """Keep a value on one spill line; distinct values stay distinct"""
    return value.replace(ESCAPE, ESCAPE * 2).replace(terminator, ESCAPED_TERMINATOR)


def unescape_value(line: str, terminator: str) -> str:
    parts = []
    i = 0
    while i < len(line):
        char = line[i]
        if char == ESCAPE and i + 1 < len(line):
            parts.append(ESCAPE if line[i + 1] == ESCAPE else terminator)
            i += 2
        else:
            parts.append(char)
            i += 1
    return "".join(parts)


class UniquenessCriterion(StreamCriterion):
    """
    Reports values of one field that occur more than once in a context.

    One instance serves exactly one context. The spill file is opened on
    construction; both temporary files are removed when finalization ends or
    when close() is called, whichever comes first.
    """

    def __init__(
        self,
        context: EvaluationContext,
        field: Optional[str] = None,
        key: str = "uniqueness",
        settings: Optional[Settings] = None,
    ):
        super().__init__()
        if context is None:
            raise CriterionConfigurationError("An evaluation context must be set", criterion=key)

        settings = settings or default_settings
        self.key = key
        self.context = context
        self.field = field
        self.field_label = field or RECORD_ID_LABEL
        self.buffer_threshold = settings.uniqueness_buffer_threshold
        self.line_terminator = settings.line_terminator
        self.sort_chunk_size = settings.sort_chunk_size

        temp_dir = Path(settings.get_temp_dir())
        file_id = str(uuid.uuid4())
        self.spill_path = temp_dir / f"{file_id}{FILE_EXT}"
        self.sorted_path = temp_dir / f"{file_id}{SORTED_SUFFIX}{FILE_EXT}"

        try:
            self._spill = open(self.spill_path, "w", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="")
        except OSError as e:
            raise CriterionConfigurationError(
                f"Cannot open spill file {self.spill_path}: {e}", criterion=key
            ) from e

        self._buffer: List[str] = []
        self._row_type: Optional[str] = context.row_type
        self._failure: Optional[Tuple[str, str]] = None
        self._released = False

    @property
    def degraded(self) -> bool:
        return self._failure is not None

    def _mark_failed(self, phase: str, error: Exception) -> None:
        logger.error(
            "Uniqueness check degraded",
            criterion=self.key,
            context=str(self.context),
            phase=phase,
            error=str(error),
        )
        if self._failure is None:
            self._failure = (phase, str(error))

    def _observe(self, record: Record, context: EvaluationContext) -> None:
        value = record.id if self.field is None else record.value(self.field)
        # Blank and absent values are never reported as duplicates
        if value is None or not value.strip():
            return

        self._row_type = record.row_type
        self._buffer.append(escape_value(value, self.line_terminator))

        if len(self._buffer) >= self.buffer_threshold:
            self._flush()

    def _flush(self) -> None:
        try:
            if self._failure is None:
                for value in self._buffer:
                    self._spill.write(value + self.line_terminator)
        except SPILL_ERRORS as e:
            self._mark_failed("write", e)
        finally:
            self._buffer.clear()

    def _finalize(self, accumulator: ResultAccumulator) -> None:
        self._flush()
        try:
            self._spill.close()
        except SPILL_ERRORS as e:
            self._mark_failed("write", e)

        if self._failure is None:
            try:
                external_sort(
                    self.spill_path,
                    self.sorted_path,
                    key=case_insensitive,
                    line_terminator=self.line_terminator,
                    chunk_size=self.sort_chunk_size,
                )
            except SPILL_ERRORS as e:
                self._mark_failed("sort", e)

        if self._failure is None:
            try:
                self._report_duplicates(accumulator)
            except SPILL_ERRORS as e:
                self._mark_failed("scan", e)

        if self._failure is not None:
            phase, error = self._failure
            accumulate_or_raise(accumulator, AggregationResult(
                f"{self.key}.degraded",
                self.context,
                {"status": "degraded", "phase": phase, "error": error, "field": self.field_label},
            ))

    def _report_duplicates(self, accumulator: ResultAccumulator) -> None:
        duplicates = 0
        previous: Optional[str] = None

        with open(self.sorted_path, "r", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="") as sorted_file:
            for line in iter_lines(sorted_file, self.line_terminator):
                if previous is not None and case_insensitive(line) == case_insensitive(previous):
                    duplicates += 1
                    value = unescape_value(line, self.line_terminator)
                    element = ValidationResultElement(
                        criterion_key=self.key,
                        category=ValidationType.FIELD_UNIQUENESS,
                        severity=Severity.ERROR,
                        message=format_message("criterion.uniqueness.duplicate", value, self.field_label),
                    )
                    accumulate_or_raise(
                        accumulator, ValidationResult(value, self.context, self._row_type, (element,))
                    )
                previous = line

        logger.info(
            "Uniqueness check complete",
            criterion=self.key,
            context=str(self.context),
            field=self.field_label,
            duplicates=duplicates,
        )

    def close(self) -> None:
        if self._released:
            return
        self._released = True
        self._buffer.clear()
        try:
            self._spill.close()
        except OSError as e:
            logger.warning("Failed to close spill file", path=str(self.spill_path), error=str(e))
        for path in (self.spill_path, self.sorted_path):
            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.error("Failed to remove temporary file", path=str(path), error=str(e))
