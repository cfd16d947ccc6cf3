import pytest

from citation_resolver.core.classification import detect_source_type
from citation_resolver.core.models import InputRecord, SourceType


@pytest.mark.parametrize(
    "record, expected",
    [
        (InputRecord(title="Intro lecture", url="https://youtu.be/dQw4w9WgXcQ"), SourceType.YOUTUBE),
        (InputRecord(title="Talk - YouTube"), SourceType.YOUTUBE),
        (InputRecord(title="LoRA paper", url="https://arxiv.org/abs/2106.09685"), SourceType.ARXIV),
        (InputRecord(title="Scaling laws (arXiv)"), SourceType.ARXIV),
        (InputRecord(title="Slides", type="pdf"), SourceType.ACADEMIC),
        (InputRecord(title="Report.docx"), SourceType.ACADEMIC),
        (InputRecord(title="Census 2020"), SourceType.ACADEMIC),
        (InputRecord(title="Smith et al. Notes"), SourceType.ACADEMIC),
        (InputRecord(title="Short", url="https://example.com/post"), SourceType.WEB),
        (InputRecord(title="How we moved our stack to a new cloud"), SourceType.WEB),
        (InputRecord(title="Notes"), SourceType.UNKNOWN),
    ],
)
def test_detect_source_type(record, expected):
    assert detect_source_type(record) is expected


def test_youtube_takes_precedence_over_academic_signals():
    record = InputRecord(title="Conference keynote 2023", url="https://www.youtube.com/watch?v=dQw4w9WgXcQ", type="pdf")

    assert detect_source_type(record) is SourceType.YOUTUBE
