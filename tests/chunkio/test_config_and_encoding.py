import codecs
import contextvars

import pytest

from chunkio import (
    ChunkIOConfig,
    ChunkListResource,
    ChunkStream,
    RetryPolicy,
    default_config,
    get_default_config,
    set_default_config_fields,
)
from chunkio.encoding import EncodingNormalizer


class TestConfig:
    def test_defaults(self):
        config = ChunkIOConfig()
        assert config.encoding == "utf-8"
        assert config.line_separator == "\n"
        assert config.retry == RetryPolicy(interval=1.0, timeout=None)

    def test_default_config_context(self):
        with default_config(encoding="latin-1"):
            stream = ChunkStream(ChunkListResource([]))
            assert stream.external_encoding == codecs.lookup("latin-1").name
        assert get_default_config().encoding == "utf-8"
        assert ChunkStream(ChunkListResource([])).external_encoding == "utf-8"

    def test_stream_snapshot_of_config(self):
        with default_config(line_separator=";"):
            stream = ChunkStream(ChunkListResource([b"a;b"]), retry=RetryPolicy(interval=0))
        assert stream.gets() == "a;"

    def test_explicit_config_with_overrides(self):
        config = ChunkIOConfig(encoding="latin-1", line_separator="|")
        stream = ChunkStream(ChunkListResource([]), config, line_separator="!")
        assert stream.config.encoding == "latin-1"
        assert stream.config.line_separator == "!"
        assert config.line_separator == "|"

    def test_set_default_config_fields(self):
        def run():
            set_default_config_fields(errors="replace")
            return get_default_config().errors

        assert contextvars.copy_context().run(run) == "replace"
        assert get_default_config().errors == "strict"

    def test_unknown_encoding(self):
        with pytest.raises(LookupError):
            ChunkStream(ChunkListResource([]), encoding="no-such-codec")


class TestEncodingNormalizer:
    def test_text_chunks_are_encoded(self):
        normalizer = EncodingNormalizer("utf-8")
        assert normalizer.normalize("é") == b"\xc3\xa9"

    def test_bytes_pass_through(self):
        normalizer = EncodingNormalizer("utf-8")
        assert not normalizer.transcoding
        assert normalizer.normalize(b"\xff\xfe") == b"\xff\xfe"

    def test_same_source_encoding_does_not_transcode(self):
        normalizer = EncodingNormalizer("utf-8", source_encoding="UTF8")
        assert not normalizer.transcoding

    def test_transcoding_split_sequence(self):
        normalizer = EncodingNormalizer("latin-1", source_encoding="utf-8")
        assert normalizer.normalize(b"h\xc3") == b"h"
        assert normalizer.normalize(b"\xa9!") == b"\xe9!"
        assert normalizer.flush() == b""

    def test_flush_truncated_sequence(self):
        normalizer = EncodingNormalizer("latin-1", errors="replace", source_encoding="utf-8")
        assert normalizer.normalize(b"a\xc3") == b"a"
        assert normalizer.flush() == b"?"


class TestStreamEncoding:
    def test_text_chunks(self):
        stream = ChunkStream(ChunkListResource(["héllo"]), retry=RetryPolicy(interval=0))
        assert stream.read() == "héllo".encode("utf-8")
        assert stream.tell() == 6

    def test_text_chunks_in_latin1(self):
        stream = ChunkStream(
            ChunkListResource(["héllo"]), encoding="latin-1", retry=RetryPolicy(interval=0)
        )
        assert stream.read() == b"h\xe9llo"

    def test_transcoded_read_and_lines(self):
        stream = ChunkStream(
            ChunkListResource([b"caf\xc3", b"\xa9\nx"]),
            encoding="latin-1",
            source_encoding="utf-8",
            retry=RetryPolicy(interval=0),
        )
        assert stream.gets() == "café\n"
        assert stream.tell() == 5
        assert stream.gets() == "x"

    def test_partial_sequence_is_not_a_short_read(self):
        stream = ChunkStream(
            ChunkListResource([b"\xc3", b"\xa9"]),
            encoding="utf-16-le",
            source_encoding="utf-8",
            retry=RetryPolicy(interval=0),
        )
        assert stream.read() == "é".encode("utf-16-le")
        assert stream.eof
