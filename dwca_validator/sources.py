"""
Record sources for delimited text files.

Reads a file with a header row in chunks so memory stays bounded, keeping
every value as the literal string found in the file. This is not an archive
reader: locating the core/extension files and their row types is up to the
caller.
"""

import csv
from pathlib import Path
from typing import Iterator, Optional, Union

import pandas as pd
import structlog

from dwca_validator.config import settings
from dwca_validator.record import Record

logger = structlog.get_logger(__name__)


def read_delimited_records(
    path: Union[str, Path],
    row_type: str,
    id_field: Optional[str] = None,
    delimiter: str = "\t",
    chunk_size: Optional[int] = None,
    encoding: str = "utf-8",
) -> Iterator[Record]:
    """
    Lazily yield one Record per data row.

    Args:
        path: Delimited file with a header row
        row_type: Row type attached to every record
        id_field: Column holding the record id; the first column when omitted
        delimiter: Field separator (tab by default)
        chunk_size: Rows read per chunk (defaults to settings.read_chunk_size)
        encoding: File encoding
    """
    chunk_size = chunk_size or settings.read_chunk_size
    reader = pd.read_csv(
        path,
        sep=delimiter,
        dtype=str,
        keep_default_na=False,
        na_filter=False,
        quoting=csv.QUOTE_NONE if delimiter == "\t" else csv.QUOTE_MINIMAL,
        chunksize=chunk_size,
        encoding=encoding,
    )

    rows = 0
    with reader:
        for chunk in reader:
            columns = list(chunk.columns)
            key = id_field or columns[0]
            if key not in columns:
                raise KeyError(f"Id column '{key}' not found in {path}")
            for values in chunk.itertuples(index=False, name=None):
                row = dict(zip(columns, values))
                rows += 1
                yield Record(id=row[key], row_type=row_type, values=row)

    logger.info("Finished reading records", path=str(path), row_type=row_type, rows=rows)
