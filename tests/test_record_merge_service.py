from citation_resolver.core.models import InputRecord, ResolutionPath, SourceType
from citation_resolver.services.record_merge_service import RecordMergeService


def test_merge_overlays_only_defined_candidate_fields(make_candidate):
    record = InputRecord(title="Scraped title", url="https://example.com/a", type="web", date="2024-02-01")
    candidate = make_candidate(
        provider_tag="openalex:title-search",
        confidence=0.8,
        title="",
        url=None,
        authors=["Ada Lovelace"],
        abstract="   ",
        venue="Journal of Tests",
        extras={"openalex_id": "W1", "keywords": []},
    )

    enriched = RecordMergeService().merge(
        record, candidate, resolved_via=ResolutionPath.SEARCH, source_type=SourceType.WEB
    )

    assert enriched.title == "Scraped title"
    assert enriched.url == "https://example.com/a"
    assert enriched.date == "2024-02-01"
    assert enriched.type == "web"
    assert enriched.authors == ["Ada Lovelace"]
    assert enriched.abstract is None
    assert enriched.venue == "Journal of Tests"
    assert enriched.extras == {"openalex_id": "W1"}
    assert enriched.confidence == 0.8
    assert enriched.enrichment_method == "openalex:title-search"
    assert enriched.resolved_via is ResolutionPath.SEARCH


def test_merge_prefers_candidate_values_when_present(make_candidate):
    record = InputRecord(title="attention.pdf", url="https://example.com/a")
    candidate = make_candidate(url="https://doi.org/10.1/x", date="2017-06-12", doi="10.1/x")

    enriched = RecordMergeService().merge(
        record,
        candidate,
        resolved_via=ResolutionPath.IDENTIFIER,
        source_type=SourceType.ACADEMIC,
        found_by_title=True,
    )

    assert enriched.title == "Attention Is All You Need"
    assert enriched.url == "https://doi.org/10.1/x"
    assert enriched.date == "2017-06-12"
    assert enriched.found_by_title is True


def test_merge_copies_author_list(make_candidate):
    authors = ["A", "B"]
    enriched = RecordMergeService().merge(
        InputRecord(title="t"),
        make_candidate(authors=authors),
        resolved_via=ResolutionPath.SEARCH,
        source_type=SourceType.UNKNOWN,
    )
    authors.append("C")

    assert enriched.authors == ["A", "B"]


def test_unresolved_and_failed_records_have_zero_confidence():
    record = InputRecord(title="t", url="https://example.com")
    merger = RecordMergeService()

    unresolved = merger.unresolved(record, source_type=SourceType.WEB)
    failed = merger.failed(record, "boom")

    assert (unresolved.confidence, unresolved.enrichment_method, unresolved.error) == (0.0, "none", None)
    assert unresolved.source_type is SourceType.WEB
    assert (failed.confidence, failed.enrichment_method, failed.error) == (0.0, "none", "boom")
    assert failed.url == "https://example.com"
