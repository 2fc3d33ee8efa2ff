"""Tests for arXiv ID extraction from bookmark URLs."""

import pytest


class TestExtractIdFromUrl:
    @pytest.mark.parametrize("url", [
        "https://arxiv.org/abs/2301.12345",
        "https://arxiv.org/pdf/2301.12345.pdf",
        "https://arxiv.org/abs/2301.12345v2",
        "http://www.arxiv.org/pdf/2301.12345v1",
    ])
    def test_new_style_urls(self, url):
        from arxivsync.arxiv_ids import extract_id_from_url

        assert extract_id_from_url(url).value == "2301.12345"

    def test_five_and_four_digit_suffix(self):
        from arxivsync.arxiv_ids import extract_id_from_url

        assert extract_id_from_url("https://arxiv.org/abs/1706.0376").value == "1706.0376"
        assert extract_id_from_url("https://arxiv.org/abs/1706.03762").value == "1706.03762"

    def test_legacy_urls(self):
        from arxivsync.arxiv_ids import extract_id_from_url

        assert extract_id_from_url("https://arxiv.org/abs/hep-th/9901001v3").value == "hep-th/9901001"
        assert extract_id_from_url("https://arxiv.org/pdf/math/0309136").value == "math/0309136"

    def test_subject_class_dropped(self):
        from arxivsync.arxiv_ids import extract_id_from_url

        assert extract_id_from_url("https://arxiv.org/pdf/math.GT/0309136").value == "math/0309136"
        assert extract_id_from_url("https://arxiv.org/abs/math.GT/0309136v1").value == "math/0309136"

    @pytest.mark.parametrize("url", [
        "not a url",
        "arxiv.org/abs/2301.12345",
        "",
        "https://example.com/abs/2301.12345",
        "https://arxiv.org/list/cs.LG/recent",
        "https://arxiv.org/abs/23011.2345",
    ])
    def test_invalid_url(self, url):
        from arxivsync.arxiv_ids import extract_id_from_url
        from arxivsync.errors import ErrorKind

        assert extract_id_from_url(url).error.kind == ErrorKind.INVALID_URL

    def test_malformed_legacy_id_is_invalid_id(self):
        from arxivsync.arxiv_ids import extract_id_from_url
        from arxivsync.errors import ErrorKind

        error = extract_id_from_url("https://arxiv.org/abs/HEP-TH/9901001").error
        assert error.kind == ErrorKind.INVALID_ID
        assert error.arxiv_id == "HEP-TH/9901001"


class TestExtractIdsFromUrls:
    def test_dedup_by_canonical_id(self):
        from arxivsync.arxiv_ids import extract_ids_from_urls

        urls = [
            "https://arxiv.org/abs/2301.12345",
            "https://arxiv.org/pdf/2301.12345.pdf",
            "https://arxiv.org/abs/2301.12345v2",
        ]
        assert extract_ids_from_urls(urls) == ["2301.12345"]

    def test_first_seen_order_and_failures_dropped(self):
        from arxivsync.arxiv_ids import extract_ids_from_urls

        urls = [
            "https://arxiv.org/abs/2402.00001",
            "https://example.com",
            "https://arxiv.org/abs/2301.12345",
            "https://arxiv.org/abs/2402.00001v4",
        ]
        assert extract_ids_from_urls(urls) == ["2402.00001", "2301.12345"]

    def test_accepts_generator(self):
        from arxivsync.arxiv_ids import extract_ids_from_urls

        assert extract_ids_from_urls(u for u in ["https://arxiv.org/abs/2301.12345"]) == ["2301.12345"]


class TestHelpers:
    def test_is_arxiv_url(self):
        from arxivsync.arxiv_ids import is_arxiv_url

        assert is_arxiv_url("https://arxiv.org/abs/2301.12345")
        assert is_arxiv_url("arxiv.org/pdf/whatever")
        assert not is_arxiv_url("https://arxiv.org/list/cs.LG/recent")
        assert not is_arxiv_url("https://example.com")

    def test_is_valid_arxiv_id(self):
        from arxivsync.arxiv_ids import is_valid_arxiv_id

        assert is_valid_arxiv_id("2301.12345v2")
        assert is_valid_arxiv_id("hep-th/9901001")
        assert is_valid_arxiv_id("math.GT/0309136")
        assert not is_valid_arxiv_id("2301.123")
        assert not is_valid_arxiv_id("HEP/9901001")

    def test_strip_version(self):
        from arxivsync.arxiv_ids import strip_version

        assert strip_version("2301.12345v12") == "2301.12345"
        assert strip_version("hep-th/9901001") == "hep-th/9901001"

    def test_canonical_id(self):
        from arxivsync.arxiv_ids import canonical_id

        assert canonical_id("math.GT/0309136v2") == "math/0309136"
        assert canonical_id("hep-th/9901001v1") == "hep-th/9901001"
        assert canonical_id("2301.12345v3") == "2301.12345"
