# filename: header_codec.py
"""
Serialization of the frequency table that precedes the packed payload.

Every header is framed as a 4-byte little-endian body length followed by
the body. Two body layouts exist:

``binary``
    One ``<BQ`` record (byte value, 64-bit count) per symbol, in ascending
    byte order. Any of the 256 byte values can appear.

``text``
    ``<count>:<byte>`` pairs joined by ``,`` with the byte written as the
    character of the same code point. The byte ``,`` cannot be represented,
    because it is also the pair delimiter; such tables are refused.
"""

import logging
import struct

from huffman_errors import MalformedHeaderError, TruncatedStreamError

logger = logging.getLogger(__name__)

LENGTH_PREFIX = struct.Struct("<I")


def frame_header(body):
    if len(body) > 0xFFFFFFFF:
        raise MalformedHeaderError(f"header body of {len(body)} bytes does not fit the length prefix")
    return LENGTH_PREFIX.pack(len(body)) + body


def read_header_length(buffer, offset=0):
    """Return ``(body_length, body_offset)`` from the length prefix at ``offset``."""
    end = offset + LENGTH_PREFIX.size
    if len(buffer) < end:
        raise TruncatedStreamError(
            f"need {LENGTH_PREFIX.size} bytes for the header length, got {max(len(buffer) - offset, 0)}"
        )
    (body_length,) = LENGTH_PREFIX.unpack_from(buffer, offset)
    return body_length, end


def read_header_body(buffer, body_length, offset):
    """Return ``(body, payload_offset)`` for a body of ``body_length`` bytes at ``offset``."""
    body = bytes(buffer[offset:offset + body_length])
    if len(body) < body_length:
        raise TruncatedStreamError(f"header declares {body_length} bytes but only {len(body)} follow")
    return body, offset + body_length


def read_header(buffer, offset=0):
    body_length, body_offset = read_header_length(buffer, offset)
    return read_header_body(buffer, body_length, body_offset)


class BinaryHeaderCodec:
    name = "binary"
    record = struct.Struct("<BQ")

    def serialize(self, table):
        return b"".join(self.record.pack(byte, count) for byte, count in sorted(table.items()))

    def parse(self, body):
        if len(body) % self.record.size:
            raise MalformedHeaderError(
                f"header body of {len(body)} bytes is not a whole number of {self.record.size}-byte records"
            )
        table = {}
        previous = -1
        for byte, count in self.record.iter_unpack(body):
            if byte <= previous:
                raise MalformedHeaderError(f"byte {byte} is out of order or repeated in the header")
            if count == 0:
                raise MalformedHeaderError(f"byte {byte} has a zero count")
            table[byte] = count
            previous = byte
        return table


class TextHeaderCodec:
    name = "text"
    pair_separator = ","
    count_separator = ":"

    def serialize(self, table):
        pairs = []
        for byte, count in sorted(table.items()):
            if chr(byte) == self.pair_separator:
                raise MalformedHeaderError(
                    f"byte {byte} ({chr(byte)!r}) collides with the text header delimiter; "
                    "use the binary header format"
                )
            pairs.append(f"{count}{self.count_separator}{chr(byte)}")
        return self.pair_separator.join(pairs).encode("utf-8")

    def parse(self, body):
        try:
            text = bytes(body).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedHeaderError(f"text header is not valid UTF-8: {e}") from e

        table = {}
        for piece in text.split(self.pair_separator):
            if not piece:
                continue
            count, sep, char = piece.partition(self.count_separator)
            if not sep:
                raise MalformedHeaderError(f"header entry {piece!r} has no {self.count_separator!r} separator")
            # Only the first character is the byte; space and newline are valid bytes too.
            if not char:
                raise MalformedHeaderError(f"header entry {piece!r} has no byte")
            if not (count.isascii() and count.isdigit()):
                raise MalformedHeaderError(f"header entry {piece!r} has a non-numeric count")
            byte = ord(char[0])
            if byte > 0xFF:
                raise MalformedHeaderError(f"header entry {piece!r} names a character outside 0-255")
            if byte in table:
                raise MalformedHeaderError(f"byte {byte} appears twice in the header")
            if int(count) == 0:
                raise MalformedHeaderError(f"byte {byte} has a zero count")
            table[byte] = int(count)
        return dict(sorted(table.items()))


HEADER_CODECS = {codec.name: codec for codec in (BinaryHeaderCodec, TextHeaderCodec)}


def get_header_codec(name):
    try:
        return HEADER_CODECS[name]()
    except KeyError:
        raise ValueError(f"unknown header format {name!r}") from None
