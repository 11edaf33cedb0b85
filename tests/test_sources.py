"""Tests for reading delimited files into records"""

import pytest

from dwca_validator.sources import read_delimited_records


@pytest.fixture
def occurrence_file(tmp_path):
    path = tmp_path / "occurrence.txt"
    path.write_text(
        "occurrenceID\tscientificName\tdecimalLatitude\tremarks\n"
        "occ-1\tPuma concolor\t10.5\tNA\n"
        "occ-2\t\t-91\t\"quoted\n"
        "occ-3\tLynx rufus\t0\t\n",
        encoding="utf-8",
    )
    return path


def test_reads_rows_as_literal_strings(occurrence_file):
    records = list(read_delimited_records(occurrence_file, "Occurrence", chunk_size=2))

    assert [r.id for r in records] == ["occ-1", "occ-2", "occ-3"]
    assert all(r.row_type == "Occurrence" for r in records)
    first, second, third = records
    assert first.value("decimalLatitude") == "10.5"
    assert first.value("remarks") == "NA"
    assert second.value("scientificName") == ""
    assert second.value("remarks") == '"quoted'
    assert third.value("decimalLatitude") == "0"
    assert third.value("missing") is None


def test_explicit_id_field(occurrence_file):
    records = list(read_delimited_records(occurrence_file, "Occurrence", id_field="scientificName"))

    assert [r.id for r in records] == ["Puma concolor", "", "Lynx rufus"]


def test_missing_id_column(occurrence_file):
    with pytest.raises(KeyError):
        list(read_delimited_records(occurrence_file, "Occurrence", id_field="catalogNumber"))


def test_comma_delimited(tmp_path):
    path = tmp_path / "taxa.csv"
    path.write_text('taxonID,scientificName\nt1,"Canis lupus, L."\n', encoding="utf-8")

    (record,) = read_delimited_records(path, "Taxon", delimiter=",")

    assert record.id == "t1"
    assert record.value("scientificName") == "Canis lupus, L."


def test_reading_is_lazy(tmp_path):
    records = read_delimited_records(tmp_path / "missing.txt", "Occurrence")

    with pytest.raises(OSError):
        next(records)
