"""Tests for version fingerprint extraction."""

import hashlib

import blake3
import pytest

from deployvelocity.scraper import (
    NO_HEADER,
    NO_INCLUDES,
    FetchResponse,
    FingerprintExtractor,
    FingerprintKind,
    digest,
)

from tests.helpers import page


def md5(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


class TestDigest:
    """Test the digest helper."""

    def test_md5_default(self):
        assert digest("abc") == md5("abc")

    def test_sha256(self):
        assert digest("abc", "sha256") == hashlib.sha256(b"abc").hexdigest()

    def test_blake3(self):
        assert digest("abc", "blake3") == blake3.blake3(b"abc").hexdigest()

    def test_unknown_hash_type(self):
        with pytest.raises(ValueError):
            digest("abc", "crc32")

    def test_extractor_rejects_unknown_hash_type(self):
        with pytest.raises(ValueError):
            FingerprintExtractor(hash_type="crc32")


class TestIncludes:
    """Test includes extraction."""

    @pytest.fixture
    def extractor(self):
        return FingerprintExtractor()

    def test_no_includes_yields_sentinel(self, extractor):
        includes, includes_list, count = extractor.extract_includes(
            "<html><body><p>plain</p></body></html>"
        )

        assert includes.value == NO_INCLUDES
        assert includes.kind is FingerprintKind.ABSENT
        assert includes_list == NO_INCLUDES
        assert count == 0

    def test_includes_in_document_order(self, extractor):
        body = (
            '<link rel="stylesheet" href="/static/app.css?v=2">'
            '<script src="/static/vendor.js"></script>'
            '<img src="/logo.png">'
            '<script src="https://cdn.example.com/main.8f3a.js"></script>'
        )

        includes, includes_list, count = extractor.extract_includes(body)

        assert (
            includes_list
            == "/static/app.css?v=2,/static/vendor.js,https://cdn.example.com/main.8f3a.js"
        )
        assert count == 3
        assert includes.value == md5(includes_list)
        assert includes.is_present

    def test_non_utf8_bytes_are_hashed_unchanged(self, extractor):
        latin1 = FetchResponse(200, b'<script src="/caf\xe9.js"></script>')
        other = FetchResponse(200, b'<script src="/caf\xe8.js"></script>')

        includes, includes_list, _ = extractor.extract_includes(latin1.text)
        other_includes, _, _ = extractor.extract_includes(other.text)

        assert includes.value == hashlib.md5(b"/caf\xe9.js").hexdigest()
        assert includes.value != other_includes.value
        assert includes_list == "/caf\ufffd.js"

    def test_single_quoted_attributes_are_ignored(self, extractor):
        _, includes_list, _ = extractor.extract_includes("<script src='/a.js'></script>")
        assert includes_list == NO_INCLUDES

    def test_changing_an_include_changes_fingerprints(self, extractor):
        before = extractor.extract(page(("/app.1111.js", "/site.css")))
        after = extractor.extract(page(("/app.2222.js", "/site.css")))

        assert before.includes.value != after.includes.value
        assert before.version.value != after.version.value


class TestHeader:
    """Test head block extraction."""

    def test_header_disabled_yields_sentinel(self):
        extractor = FingerprintExtractor(parse_headers=False)
        header, count = extractor.extract_header(
            page(head='<meta name="x" content="a">')
        )

        assert header.value == NO_HEADER
        assert header.kind is FingerprintKind.ABSENT
        assert count == 0

    def test_missing_head_yields_sentinel(self):
        extractor = FingerprintExtractor(parse_headers=True)
        header, _ = extractor.extract_header("<html><body></body></html>")

        assert header.value == NO_HEADER

    def test_whitespace_and_case_are_normalized(self):
        extractor = FingerprintExtractor(parse_headers=True)
        a, _ = extractor.extract_header(page(head='<meta name="x" content="a">'))
        b, _ = extractor.extract_header(
            page(head='\n  <META  NAME="X"\n content="A" >\n')
        )

        assert a.value == b.value

    def test_csrf_value_does_not_change_header(self):
        extractor = FingerprintExtractor(parse_headers=True)
        first = extractor.extract(
            page(head='<meta name="csrf-token" content="abc123"><link rel="icon" href="/f.ico">')
        )
        second = extractor.extract(
            page(head='<meta name="csrf-token" content="zzz999"><link rel="icon" href="/f.ico">')
        )

        assert first.header.value == second.header.value
        assert first.version.value == second.version.value
        assert first.header_tag_count == 2

    def test_pad_attribute_is_neutralized(self):
        extractor = FingerprintExtractor(parse_headers=True)
        header, _ = extractor.extract_header(
            page(head='<meta name="x" content="a"><meta name="_pad" content="1234">')
        )

        assert header.value == md5('name="x"content="a"\nremoved')

    def test_other_head_tags_are_ignored(self):
        extractor = FingerprintExtractor(parse_headers=True)
        a, _ = extractor.extract_header(page(head='<meta name="x" content="a">'))
        b, _ = extractor.extract_header(
            page(head='<title>Changed</title><meta name="x" content="a">')
        )

        assert a.value == b.value

    def test_head_without_tags_hashes_empty_content(self):
        extractor = FingerprintExtractor(parse_headers=True)
        header, count = extractor.extract_header(page(head="<title>t</title>"))

        assert header.value == md5("")
        assert count == 0


class TestVersion:
    """Test composite version fingerprints."""

    def test_meta_and_script_scenario(self):
        extractor = FingerprintExtractor(parse_headers=True)
        body = (
            '<html><head><meta name="x" content="a"></head>'
            '<script src="/a.js"></script></html>'
        )

        result = extractor.extract(body)

        assert result.includes_list == "/a.js"
        assert result.includes.value == md5("/a.js")
        assert result.header.value == md5('name="x"content="a"')
        assert result.version.value == md5(md5("/a.js") + md5('name="x"content="a"'))

    def test_version_of_empty_page_is_hash_of_sentinels(self):
        result = FingerprintExtractor().extract("<html></html>")

        assert result.version.value == md5(NO_INCLUDES + NO_HEADER)
        assert result.version.kind is FingerprintKind.HASH

    def test_extraction_is_deterministic(self):
        extractor = FingerprintExtractor(parse_headers=True)
        body = page(("/a.js", "/b.css"), head='<meta name="x" content="a">')

        assert extractor.extract(body) == extractor.extract(body)

    def test_hash_type_is_applied_throughout(self):
        extractor = FingerprintExtractor(hash_type="sha256")
        result = extractor.extract(page(("/a.js",)))

        assert result.includes.value == hashlib.sha256(b"/a.js").hexdigest()
        assert len(result.version.value) == 64
        assert result.version.hash_type == "sha256"
