"""
Source identity tagging.

Both sources allocate identifiers independently, so ``KH001`` may name
two different customers. Every identifier field is prefixed with its
source's tag (``PG_KH001``, ``CSV_KH001``) before deduplication. Tagging
is idempotent: values already carrying any known prefix are left alone.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from conformer.config.settings import SourcesConfig
from conformer.normalization.text import is_blank
from conformer.utils.logging import get_logger

log = get_logger(__name__)


class SourcePrefixer:
    """
    Prefixes identifier fields by the record's ``source``.

    Records from a source without a configured prefix are copied
    unchanged.
    """

    def __init__(self, sources: SourcesConfig | None = None) -> None:
        self.sources = sources or SourcesConfig()
        self._known = tuple(self.sources.prefixes.values())

    def prefix_for(self, source: Any) -> str | None:
        return self.sources.prefixes.get(source) if isinstance(source, str) else None

    def tag(self, value: Any, prefix: str) -> Any:
        """Prefix one identifier value unless it is already tagged."""
        if is_blank(value):
            return value
        text = str(value).strip()
        if text.startswith(self._known):
            return text
        return f"{prefix}{text}"

    def apply(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Return a tagged copy of ``record``."""
        tagged = dict(record)
        prefix = self.prefix_for(record.get("source"))
        if prefix is None:
            return tagged
        for name in self.sources.identifier_fields:
            if name in tagged:
                tagged[name] = self.tag(tagged[name], prefix)
        return tagged

    def apply_all(
        self, data: Mapping[str, Iterable[Mapping[str, Any]]]
    ) -> dict[str, list[dict[str, Any]]]:
        """Tag every record of every entity type."""
        tagged = {
            entity: [self.apply(record) for record in records]
            for entity, records in data.items()
        }
        log.debug(
            "Tagged identifiers",
            records=sum(len(records) for records in tagged.values()),
        )
        return tagged
