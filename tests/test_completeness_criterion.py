"""Tests for the completeness criterion and its value transformations"""

from dwca_validator.criteria.completeness import CompletenessCriterion, CompletenessCriterionConfiguration
from dwca_validator.criteria.transformations import BooleanTransformation, NotBlankTransformation
from dwca_validator.messages import format_message
from dwca_validator.result.types import Severity, ValidationType


def _criterion(row_type_restriction=None, severity=Severity.ERROR):
    return CompletenessCriterion(CompletenessCriterionConfiguration(
        value_transformations=[
            NotBlankTransformation("scientificName"),
            NotBlankTransformation("basisOfRecord"),
        ],
        row_type_restriction=row_type_restriction,
        severity=severity,
    ))


def test_complete_record_yields_empty_result(make_record, core_context):
    record = make_record("1", scientificName="Puma concolor", basisOfRecord="PreservedSpecimen")

    result = _criterion().validate(record, core_context)

    assert result is not None
    assert result.passed
    assert result.record_id == "1"
    assert result.row_type == "Occurrence"
    assert result.context == core_context


def test_blank_and_missing_fields_yield_one_element_each(make_record, core_context):
    record = make_record("1", scientificName="  ")

    result = _criterion(severity=Severity.WARNING).validate(record, core_context)

    assert len(result.elements) == 2
    assert all(e.category == ValidationType.RECORD_CONTENT_VALUE for e in result.elements)
    assert all(e.severity == Severity.WARNING for e in result.elements)
    assert all(e.criterion_key == "completeness" for e in result.elements)
    assert result.messages() == [
        format_message("criterion.completeness.incomplete", "scientificName"),
        format_message("criterion.completeness.incomplete", "basisOfRecord"),
    ]


def test_row_type_restriction_excludes_other_row_types(make_record, core_context):
    criterion = _criterion(row_type_restriction="Occurrence")

    for row_type in ("Taxon", "MeasurementOrFact", ""):
        record = make_record("1", row_type=row_type)
        assert criterion.validate(record, core_context) is None


def test_row_type_restriction_is_case_insensitive(make_record, core_context):
    criterion = _criterion(row_type_restriction="occurrence")
    record = make_record("1", row_type="Occurrence", scientificName="x", basisOfRecord="y")

    assert criterion.validate(record, core_context).passed


def test_blank_restriction_means_no_restriction(make_record, core_context):
    criterion = _criterion(row_type_restriction="  ")

    assert criterion.validate(make_record("1", row_type="Taxon"), core_context) is not None


def test_boolean_transformation_fails_on_false_or_unparseable(make_record, core_context):
    criterion = CompletenessCriterion(CompletenessCriterionConfiguration(
        value_transformations=[BooleanTransformation("georeferenced")],
        key="georeferenced_flag",
    ))

    assert criterion.validate(make_record("1", georeferenced="Yes"), core_context).passed
    assert criterion.validate(make_record("2", georeferenced="1"), core_context).passed
    assert not criterion.validate(make_record("3", georeferenced="false"), core_context).passed
    assert not criterion.validate(make_record("4", georeferenced="maybe"), core_context).passed
    assert not criterion.validate(make_record("5"), core_context).passed
    assert criterion.validate(make_record("6", georeferenced="no"), core_context).elements[0].criterion_key == "georeferenced_flag"


def test_transformation_results(make_record):
    record = make_record("1", a="", b="x")

    missing = NotBlankTransformation("zzz").transform(record)
    blank = NotBlankTransformation("a").transform(record)
    filled = NotBlankTransformation("b").transform(record)

    assert missing.is_not_transformed and missing.data is None
    assert blank.transformed and blank.data is False
    assert filled.transformed and filled.data is True
