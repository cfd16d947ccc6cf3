"""Single-record resolution through the ordered strategy chain.

Example
-------
```python
from citation_resolver.config import ResolverConfig
from citation_resolver.core.models import InputRecord
from citation_resolver.services.resolution_service import ResolutionService

resolver = ResolutionService.from_config(ResolverConfig())
enriched = resolver.resolve(InputRecord(title="Attention Is All You Need", type="pdf"))
```
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from citation_resolver.config import ResolverConfig
from citation_resolver.core.classification import detect_source_type
from citation_resolver.core.models import EnrichedRecord, InputRecord
from citation_resolver.providers import ProviderSet
from citation_resolver.services.record_merge_service import RecordMergeService
from citation_resolver.services.strategies import StrategyContext, build_chain

logger = logging.getLogger(__name__)


class ResolutionService:
    """Resolve one record to at most one accepted candidate.

    The record is classified, the matching chain is walked in order and the
    first strategy that returns a candidate wins. Nothing is blended across
    strategies; a record no strategy can place comes back unresolved.
    """

    def __init__(
        self,
        providers: ProviderSet,
        config: Optional[ResolverConfig] = None,
        *,
        merger: Optional[RecordMergeService] = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self.context = StrategyContext(providers=providers, config=self.config)
        self.merger = merger or RecordMergeService()

    @classmethod
    def from_config(
        cls, config: ResolverConfig, *, session: Optional[requests.Session] = None
    ) -> "ResolutionService":
        return cls(ProviderSet.from_config(config, session=session), config)

    @property
    def providers(self) -> ProviderSet:
        return self.context.providers

    def resolve(self, record: InputRecord) -> EnrichedRecord:
        source_type = detect_source_type(record)
        logger.debug("Resolving %r as %s", record.title, source_type.value)

        for strategy in build_chain(source_type):
            candidate = strategy.run(record, self.context)
            if candidate is None:
                continue

            logger.info(
                "Resolved source metadata",
                extra={
                    "title": record.title,
                    "strategy": strategy.name,
                    "provider_tag": candidate.provider_tag,
                    "confidence": candidate.confidence,
                    "resolved_via": strategy.resolved_via.value,
                },
            )
            return self.merger.merge(
                record,
                candidate,
                resolved_via=strategy.resolved_via,
                source_type=source_type,
                found_by_title=strategy.found_by_title,
            )

        logger.info("No metadata match", extra={"title": record.title, "source_type": source_type.value})
        return self.merger.unresolved(record, source_type=source_type)
