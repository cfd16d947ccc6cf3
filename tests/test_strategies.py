from citation_resolver.core.models import Identifier, IdentifierKind, InputRecord, ResolutionPath, SourceType
from citation_resolver.providers.clients.crossref import DoiSearchHit
from citation_resolver.services.strategies import (
    StrategyContext,
    arxiv_lookup,
    build_chain,
    doi_by_title_search,
    resolve_identifier,
    search_title,
    structured_author_year,
    url_pattern,
    web_page,
    youtube_video,
)


def test_chain_runs_identifier_then_type_specific_then_search_strategies():
    names = [strategy.name for strategy in build_chain(SourceType.ARXIV)]

    assert names == [
        "identifier_in_source",
        "url_pattern",
        "doi_by_title_search",
        "arxiv_lookup",
        "structured_author_year",
        "crossref_title",
        "openalex_title",
        "semanticscholar_title",
    ]


def test_unknown_and_academic_records_have_no_type_specific_strategy():
    generic = [strategy.name for strategy in build_chain(SourceType.UNKNOWN)]

    assert generic == [strategy.name for strategy in build_chain(SourceType.ACADEMIC)]
    assert "web_page" not in generic
    assert [s.name for s in build_chain(SourceType.WEB)][3] == "web_page"
    assert [s.name for s in build_chain(SourceType.YOUTUBE)][3] == "youtube_video"


def test_only_title_search_identifier_is_flagged_found_by_title():
    flagged = [strategy.name for strategy in build_chain(SourceType.UNKNOWN) if strategy.found_by_title]
    paths = {strategy.name: strategy.resolved_via for strategy in build_chain(SourceType.WEB)}

    assert flagged == ["doi_by_title_search"]
    assert paths["identifier_in_source"] is ResolutionPath.IDENTIFIER
    assert paths["url_pattern"] is ResolutionPath.URL
    assert paths["crossref_title"] is ResolutionPath.SEARCH


def test_resolve_identifier_dispatches_by_kind(stub_providers, config, journal):
    context = StrategyContext(stub_providers(), config)

    resolve_identifier(Identifier(IdentifierKind.ARXIV, "2106.09685"), context)
    resolve_identifier(Identifier(IdentifierKind.PUBMED, "31452104"), context)
    resolve_identifier(Identifier(IdentifierKind.PLATFORM, "abc", "semanticscholar"), context)
    resolve_identifier(Identifier(IdentifierKind.PLATFORM, "dQw4w9WgXcQ", "youtube"), context)
    resolve_identifier(Identifier(IdentifierKind.DOI, "10.1000/x"), context)

    assert [(provider, method) for provider, method, _ in journal] == [
        ("arxiv", "get_by_id"),
        ("pubmed", "get_by_pmid"),
        ("semanticscholar", "get_by_paper_id"),
        ("youtube", "get_video"),
        ("crossref", "works_by_doi"),
        ("openalex", "get_by_doi"),
    ]


def test_doi_lookup_prefers_crossref(stub_providers, config, make_candidate, journal):
    candidate = make_candidate()
    context = StrategyContext(stub_providers(crossref={"works_by_doi": candidate}), config)

    assert resolve_identifier(Identifier(IdentifierKind.DOI, "10.1000/x"), context) is candidate
    assert [method for _, method, _ in journal] == ["works_by_doi"]


def test_url_pattern_skips_identifier_already_tried(stub_providers, config, journal):
    context = StrategyContext(stub_providers(), config)
    record = InputRecord(title="Some talk", url="https://arxiv.org/abs/2106.09685")

    assert url_pattern(record, context) is None
    assert journal == []


def test_url_pattern_tries_url_identifier_when_title_had_another(stub_providers, config, make_candidate, journal):
    candidate = make_candidate(provider_tag="arxiv:id", confidence=0.95)
    context = StrategyContext(stub_providers(arxiv={"get_by_id": candidate}), config)
    record = InputRecord(title="PMID: 31452104", url="https://arxiv.org/abs/2106.09685")

    assert url_pattern(record, context) is candidate
    assert journal == [("arxiv", "get_by_id", ("2106.09685",))]


def test_doi_by_title_search_resolves_suggested_doi(stub_providers, config, make_candidate, journal):
    candidate = make_candidate()
    providers = stub_providers(
        crossref={
            "find_doi_by_title": DoiSearchHit(doi="10.5555/abc", score=85.0),
            "works_by_doi": candidate,
        }
    )

    result = doi_by_title_search(InputRecord(title="Deep Models.pdf"), StrategyContext(providers, config))

    assert result is candidate
    assert journal == [
        ("crossref", "find_doi_by_title", ("Deep Models",)),
        ("crossref", "works_by_doi", ("10.5555/abc",)),
    ]


def test_doi_by_title_search_falls_back_to_openalex_for_suggested_doi(
    stub_providers, config, make_candidate, journal
):
    candidate = make_candidate(provider_tag="openalex:doi")
    providers = stub_providers(
        crossref={"find_doi_by_title": DoiSearchHit(doi="10.48550/arxiv.1706.03762", score=85.0)},
        openalex={"get_by_doi": candidate},
    )

    result = doi_by_title_search(InputRecord(title="Attention Is All You Need"), StrategyContext(providers, config))

    assert result is candidate
    assert journal == [
        ("crossref", "find_doi_by_title", ("Attention Is All You Need",)),
        ("crossref", "works_by_doi", ("10.48550/arxiv.1706.03762",)),
        ("openalex", "get_by_doi", ("10.48550/arxiv.1706.03762",)),
    ]


def test_youtube_video_reads_id_from_url(stub_providers, config, make_candidate, journal):
    candidate = make_candidate(provider_tag="youtube:video-id", confidence=0.95)
    context = StrategyContext(stub_providers(youtube={"get_video": candidate}), config)
    record = InputRecord(title="Talk 10.1000/slides", url="https://youtu.be/dQw4w9WgXcQ")

    assert youtube_video(record, context) is candidate
    assert journal == [("youtube", "get_video", ("dQw4w9WgXcQ",))]


def test_youtube_video_skips_when_identifier_strategy_already_looked(stub_providers, config, journal):
    context = StrategyContext(stub_providers(), config)

    assert youtube_video(InputRecord(title="Talk", url="https://youtu.be/dQw4w9WgXcQ"), context) is None
    assert youtube_video(InputRecord(title="Talk - YouTube"), context) is None
    assert journal == []


def test_arxiv_lookup_uses_bare_id_then_falls_back_to_title_search(stub_providers, config, journal):
    context = StrategyContext(stub_providers(), config)

    arxiv_lookup(InputRecord(title="Scaling Laws arXiv 2001.08361v1"), context)

    assert journal == [
        ("arxiv", "get_by_id", ("2001.08361",)),
        ("arxiv", "search_by_title", ("Scaling Laws arXiv 2001.08361v1",)),
    ]


def test_web_page_requires_url(stub_providers, config, journal):
    context = StrategyContext(stub_providers(), config)

    assert web_page(InputRecord(title="A long enough headline for the web"), context) is None
    web_page(InputRecord(title="Post", url="https://blog.example.com/post"), context)

    assert journal == [("webpage", "fetch_metadata", ("https://blog.example.com/post",))]


def test_structured_query_needs_author_and_year(stub_providers, config, journal):
    context = StrategyContext(stub_providers(), config)

    assert structured_author_year(InputRecord(title="Deep Models"), context) is None
    structured_author_year(InputRecord(title="Smith et al - 2024 - Deep Models.pdf"), context)

    assert journal == [("crossref", "search_by_author_year", ("Smith", 2024, "Smith - Deep Models"))]


def test_search_title_falls_back_to_raw_title():
    assert search_title(InputRecord(title="Deep Models.pdf")) == "Deep Models"
    assert search_title(InputRecord(title="'' .pdf")) == "'' .pdf"
