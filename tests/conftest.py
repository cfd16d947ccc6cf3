import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

import pytest

# Ensure repository root is on the import path for local package imports during tests.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from citation_resolver.config import ResolverConfig  # noqa: E402
from citation_resolver.core.models import CandidateMetadata  # noqa: E402
from citation_resolver.providers import ProviderSet  # noqa: E402

PROVIDER_NAMES = ("crossref", "openalex", "semanticscholar", "arxiv", "pubmed", "youtube", "webpage")


class StubProvider:
    """Answer any provider method from a table and journal every call.

    A table value may be a plain return value or a callable receiving the
    call's arguments. Methods missing from the table return ``None``.
    """

    def __init__(self, name: str, journal: List[Tuple[str, str, tuple]], **answers: Any) -> None:
        self.name = name
        self.journal = journal
        self.answers = answers

    def __getattr__(self, method: str) -> Callable[..., Any]:
        if method.startswith("_"):
            raise AttributeError(method)

        def call(*args: Any) -> Any:
            self.journal.append((self.name, method, args))
            answer = self.answers.get(method)
            return answer(*args) if callable(answer) else answer

        return call


@pytest.fixture()
def config() -> ResolverConfig:
    return ResolverConfig(_env_file=None, request_delay_s=0.0)


@pytest.fixture()
def journal() -> List[Tuple[str, str, tuple]]:
    return []


@pytest.fixture()
def stub_providers(journal):
    """Build a ProviderSet of stubs: ``stub_providers(crossref={"works_by_doi": ...})``."""

    def build(**answers_by_provider: Dict[str, Any]) -> ProviderSet:
        unknown = set(answers_by_provider) - set(PROVIDER_NAMES)
        if unknown:
            raise ValueError(f"Unknown providers: {sorted(unknown)}")
        stubs = {
            name: StubProvider(name, journal, **answers_by_provider.get(name, {}))
            for name in PROVIDER_NAMES
        }
        return ProviderSet(**stubs)  # type: ignore[arg-type]

    return build


@pytest.fixture()
def make_candidate() -> Callable[..., CandidateMetadata]:
    def build(provider_tag: str = "crossref:doi", confidence: float = 1.0, **fields: Any) -> CandidateMetadata:
        fields.setdefault("title", "Attention Is All You Need")
        return CandidateMetadata(provider_tag=provider_tag, confidence=confidence, **fields)

    return build
