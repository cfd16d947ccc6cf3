import responses

from citation_resolver.providers.clients.webpage import WebPageClient

PAGE_URL = "https://blog.example.com/posts/scaling"

PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>Fallback title | Example Blog</title>
  <meta property="og:title" content="How We Scaled Our Search Cluster">
  <meta property="og:description" content="Notes on sharding and replication.">
  <meta property="og:site_name" content="Example Engineering">
  <meta name="author" content="Dana Writer">
  <meta property="article:published_time" content="2023-05-04T10:00:00Z">
  <meta name="citation_doi" content="doi:10.1234/Blog.5">
</head>
<body><p>Hello</p></body>
</html>
"""


@responses.activate
def test_fetch_metadata_reads_open_graph_and_meta_tags() -> None:
    responses.add(responses.GET, PAGE_URL, body=PAGE, status=200, content_type="text/html")

    candidate = WebPageClient().fetch_metadata(PAGE_URL)

    assert candidate is not None
    assert candidate.provider_tag == "web:page-metadata"
    assert candidate.confidence == 0.7
    assert candidate.title == "How We Scaled Our Search Cluster"
    assert candidate.authors == ["Dana Writer"]
    assert candidate.year == 2023
    assert candidate.date == "2023-05-04T10:00:00Z"
    assert candidate.abstract == "Notes on sharding and replication."
    assert candidate.publisher == "Example Engineering"
    assert candidate.doi == "10.1234/blog.5"
    assert candidate.url == PAGE_URL


@responses.activate
def test_fetch_metadata_falls_back_to_title_tag_and_hostname() -> None:
    responses.add(
        responses.GET,
        PAGE_URL,
        body="<html><head><title>  Plain   page </title></head><body></body></html>",
        status=200,
        content_type="text/html",
    )

    candidate = WebPageClient(confidence=0.6).fetch_metadata(PAGE_URL)

    assert candidate is not None
    assert candidate.title == "Plain page"
    assert candidate.publisher == "blog.example.com"
    assert candidate.confidence == 0.6
    assert candidate.authors == []
    assert candidate.doi is None


@responses.activate
def test_fetch_metadata_returns_none_on_http_error() -> None:
    responses.add(responses.GET, PAGE_URL, status=500)

    assert WebPageClient().fetch_metadata(PAGE_URL) is None


def test_non_http_urls_are_skipped() -> None:
    assert WebPageClient().fetch_metadata("ftp://example.com/file") is None
    assert WebPageClient().fetch_metadata("") is None
