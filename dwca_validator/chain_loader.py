"""
Build evaluation chains from a YAML configuration file.

The document has two sections, each a list of entries with a "type" and
that type's options:

    record_criteria:
      - type: completeness
        fields: [occurrenceID, basisOfRecord]
      - type: uniqueness
        field: occurrenceID
        contexts: [core]
    dataset_criteria:
      - type: record_count

Entries are validated when the loader is created. Criteria are instantiated
per context by build_chain(), since some of them (uniqueness) own
per-context resources.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import structlog
import yaml
from pydantic import ValidationError

from dwca_validator.chain import EvaluationChain
from dwca_validator.config import Settings, settings as default_settings
from dwca_validator.exceptions import CriterionConfigurationError
from dwca_validator.registry import (
    CriterionKind, CriterionRegistration, CriterionRegistry, default_registry
)
from dwca_validator.result.accumulator import ResultAccumulator
from dwca_validator.result.types import EvaluationContext
from dwca_validator.schemas import ChainConfiguration, CriterionOptions

logger = structlog.get_logger(__name__)

ParsedEntry = Tuple[CriterionRegistration, CriterionOptions]


class ChainLoader:
    """Parsed chain configuration able to build one chain per context"""

    def __init__(
        self,
        configuration: Dict[str, Any],
        registry: Optional[CriterionRegistry] = None,
        settings: Optional[Settings] = None,
    ):
        self.registry = registry or default_registry()
        self.settings = settings or default_settings

        if not configuration:
            raise CriterionConfigurationError("Chain configuration is empty")
        try:
            parsed = ChainConfiguration(**configuration)
        except (ValidationError, TypeError) as e:
            raise CriterionConfigurationError(f"Invalid chain configuration: {e}") from e

        self.record_entries = self._parse_section(parsed.record_criteria, CriterionKind.RECORD)
        self.dataset_entries = self._parse_section(parsed.dataset_criteria, CriterionKind.DATASET)

        if not self.record_entries and not self.dataset_entries:
            raise CriterionConfigurationError("Chain configuration declares no criteria")

    @classmethod
    def from_yaml_string(cls, text: str, **kwargs) -> "ChainLoader":
        try:
            configuration = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise CriterionConfigurationError(f"Cannot parse chain configuration: {e}") from e
        if configuration is not None and not isinstance(configuration, dict):
            raise CriterionConfigurationError("Chain configuration must be a mapping")
        return cls(configuration or {}, **kwargs)

    @classmethod
    def from_yaml_file(cls, path: Union[str, Path], **kwargs) -> "ChainLoader":
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise CriterionConfigurationError(f"Cannot read chain configuration {path}: {e}") from e
        logger.info("Loading chain configuration", path=str(path))
        return cls.from_yaml_string(text, **kwargs)

    def _parse_section(self, entries: List[Dict[str, Any]], kind: CriterionKind) -> List[ParsedEntry]:
        parsed = []
        for position, entry in enumerate(entries):
            if not isinstance(entry, dict) or "type" not in entry:
                raise CriterionConfigurationError(
                    f"{kind.value} criterion #{position + 1} must be a mapping with a 'type'"
                )
            options = dict(entry)
            registration = self.registry.get(options.pop("type"), kind)
            parsed.append((registration, self.registry.parse_options(registration, options)))
        return parsed

    def _build(self, entries: List[ParsedEntry], context: EvaluationContext, into: list) -> None:
        for registration, options in entries:
            if options.applies_to(context):
                into.append(registration.factory(options, context, self.settings))

    def build_chain(self, context: EvaluationContext, accumulator: ResultAccumulator) -> EvaluationChain:
        if context is None:
            raise CriterionConfigurationError("An evaluation context is required to build a chain")

        record_criteria: list = []
        dataset_criteria: list = []
        try:
            self._build(self.record_entries, context, record_criteria)
            self._build(self.dataset_entries, context, dataset_criteria)
            chain = EvaluationChain(context, record_criteria, dataset_criteria, accumulator)
        except Exception:
            # Criteria built so far may already own temp files
            for criterion in record_criteria:
                close = getattr(criterion, "close", None)
                if close is not None:
                    close()
            raise

        logger.debug("Built evaluation chain", context=str(context), criteria=chain.keys)
        return chain
