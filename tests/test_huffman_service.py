import io
import random
import time

import pytest

import huffman_service as hs
from huffman_config import CodecConfig
from huffman_errors import (
    EmptyInputError,
    HuffmanError,
    InvalidTraversalError,
    MalformedHeaderError,
    TruncatedStreamError,
)


def _get_service(header_format="binary", chunk_size=65536):
    return hs.HuffmanService(CodecConfig(chunk_size=chunk_size, header_format=header_format))


def test_roundtrip_random_10kb():
    svc = _get_service()

    data = bytes(random.getrandbits(8) for _ in range(10 * 1024))
    compressed = svc.compress(data)
    out = svc.decompress(compressed)
    assert out == data


def test_roundtrip_all_bytes_once():
    svc = _get_service()

    data = bytes(range(256))
    compressed = svc.compress(data)
    out = svc.decompress(compressed)
    assert out == data


def test_roundtrip_abccba_exact_bytes():
    svc = _get_service()

    compressed = svc.compress(b"abccba")
    # c=0, a=10, b=11 -> 1011001110 padded to 16 bits
    header_body = b"".join(bytes([byte]) + (2).to_bytes(8, "little") for byte in b"abc")
    assert compressed == len(header_body).to_bytes(4, "little") + header_body + b"\xb3\x80"
    assert svc.decompress(compressed) == b"abccba"


def test_empty_input_raises():
    svc = _get_service()
    with pytest.raises(EmptyInputError):
        svc.compress(b"")


def test_single_byte_repeated_small():
    svc = _get_service()

    compressed = svc.compress(b"aaaa")
    assert compressed.endswith(b"\x00")
    assert svc.decompress(compressed) == b"aaaa"


def test_single_byte_repeated_large():
    svc = _get_service()

    data = b'A' * (1024 * 10)
    compressed = svc.compress(data)
    # one bit per symbol
    assert len(compressed) == 4 + 9 + 1280
    assert svc.decompress(compressed) == data


def test_single_byte_input():
    svc = _get_service()
    assert svc.decompress(svc.compress(b"\x00")) == b"\x00"


def test_small_inputs():
    svc = _get_service()

    for n in (1, 2, 3):
        data = bytes(random.getrandbits(8) for _ in range(n))
        compressed = svc.compress(data)
        out = svc.decompress(compressed)
        assert out == data


def test_compress_is_deterministic():
    svc = _get_service()
    data = b"the quick brown fox jumps over the lazy dog" * 20
    assert svc.compress(data) == svc.compress(data)
    assert svc.compress(data) == _get_service().compress(data)


def test_file_like_sources_match_bytes():
    svc = _get_service(chunk_size=7)
    data = b"mississippi river banks\n" * 30

    from_stream = svc.compress(io.BytesIO(data))
    assert from_stream == svc.compress(data)
    assert svc.decompress(io.BytesIO(from_stream)) == data


def test_delimiter_bytes_roundtrip_with_binary_header():
    svc = _get_service()
    data = b",,,xx"
    assert svc.decompress(svc.compress(data)) == data


def test_text_header_roundtrip():
    svc = _get_service("text")
    data = b"hello world:\nsecond line: done\n\xff\x00"
    compressed = svc.compress(data)
    body_length = int.from_bytes(compressed[:4], "little")
    assert b"2:\n" in compressed[4:4 + body_length]
    assert svc.decompress(compressed) == data


def test_text_header_refuses_delimiter_byte():
    svc = _get_service("text")
    with pytest.raises(MalformedHeaderError):
        svc.compress(b",,,xx")


def test_module_level_encode_decode():
    config = CodecConfig()
    data = b"abracadabra"
    assert hs.decode(hs.encode(data, config), config) == data


def test_truncated_stream_behavior():
    svc = _get_service()

    data = b'This is a test' * 100
    compressed = svc.compress(data)
    # truncate last few bytes
    truncated = compressed[:-3]
    with pytest.raises(TruncatedStreamError):
        svc.decompress(truncated)


def test_truncated_header_behavior():
    svc = _get_service()
    compressed = svc.compress(b"Hello World")
    with pytest.raises(TruncatedStreamError):
        svc.decompress(compressed[:2])
    with pytest.raises(TruncatedStreamError):
        svc.decompress(compressed[:10])


def test_corrupted_header_behavior():
    svc = _get_service()

    data = b'Hello World' * 50
    compressed = bytearray(svc.compress(data))
    # flip some bits in the beginning to simulate header corruption
    compressed[0] ^= 0xFF
    with pytest.raises(HuffmanError):
        svc.decompress(bytes(compressed))


def test_malformed_header_body():
    svc = _get_service()
    body = b"\x61" + (2).to_bytes(8, "little") + b"\x61" + (1).to_bytes(8, "little")
    with pytest.raises(MalformedHeaderError):
        svc.decompress(len(body).to_bytes(4, "little") + body + b"\x00")


def test_empty_header_body():
    svc = _get_service()
    with pytest.raises(EmptyInputError):
        svc.decompress(b"\x00\x00\x00\x00")


def test_single_leaf_payload_with_one_bit_is_invalid():
    svc = _get_service()
    compressed = svc.compress(b"aaaa")
    with pytest.raises(InvalidTraversalError):
        svc.decompress(compressed[:-1] + b"\x40")


def test_trailing_bytes_are_ignored():
    svc = _get_service()
    compressed = svc.compress(b"abccba")
    assert svc.decompress(compressed + b"\xff\xff") == b"abccba"


def test_decoder_walks_every_stage():
    svc = _get_service()
    compressed = svc.compress(b"abccba")

    decoder = hs.HuffmanDecoder(compressed, svc.header_codec)
    assert decoder.stage is hs.DecodeStage.READ_LENGTH
    assert decoder.run() == b"abccba"
    assert decoder.stage is hs.DecodeStage.DONE
    assert decoder.header_length == 27
    assert decoder.freqs == {ord("a"): 2, ord("b"): 2, ord("c"): 2}
    assert decoder.tree.total == 6


def test_decoder_stops_at_failing_stage():
    svc = _get_service()
    decoder = hs.HuffmanDecoder(b"\x05\x00\x00\x00ab", svc.header_codec)
    with pytest.raises(TruncatedStreamError):
        decoder.run()
    assert decoder.stage is hs.DecodeStage.READ_HEADER


@pytest.mark.timeout(120)
def test_performance_5mb_compress():
    svc = _get_service()
    data = bytes(random.getrandbits(8) for _ in range(5 * 1024 * 1024))
    t0 = time.time()
    compressed = svc.compress(data)
    dur = time.time() - t0
    assert len(compressed) > 0
    print(f"Compression time for 5MB: {dur:.4f}s")


@pytest.mark.timeout(120)
def test_performance_256kb_roundtrip():
    svc = _get_service()
    data = bytes(random.getrandbits(8) for _ in range(256 * 1024))
    assert svc.decompress(svc.compress(data)) == data
