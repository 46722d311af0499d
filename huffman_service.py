# filename: huffman_service.py

import logging
from enum import Enum

from bit_packing import BitPacker, BitUnpacker
from header_codec import frame_header, get_header_codec, read_header_body, read_header_length
from huffman_config import load_config
from huffman_core import FrequencyCounter, HuffmanLogic
from huffman_errors import EmptyInputError, InvalidTraversalError, TruncatedStreamError

logger = logging.getLogger(__name__)


def read_source(source, chunk_size, counter=None):
    """
    Buffer a bytes-like object or a binary file object in memory. When a
    FrequencyCounter is given it sees every chunk as it is read.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
        if counter is not None:
            counter.update(data)
        return data

    chunks = []
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            break
        if counter is not None:
            counter.update(chunk)
        chunks.append(chunk)
    return b"".join(chunks)


class DecodeStage(Enum):
    READ_LENGTH = "read_length"
    READ_HEADER = "read_header"
    PARSE_HEADER = "parse_header"
    REBUILD_TREE = "rebuild_tree"
    TRAVERSE_BITS = "traverse_bits"
    DONE = "done"


class HuffmanDecoder:
    """
    Decodes one compressed buffer, moving through the DecodeStage values in
    order. ``stage`` holds the stage that runs next (DONE once finished), and
    the intermediate results stay on the instance for inspection.
    """

    def __init__(self, data, header_codec, logic=None, unpacker=None):
        self.data = data
        self.header_codec = header_codec
        self.logic = logic or HuffmanLogic()
        self.unpacker = unpacker or BitUnpacker()
        self.stage = DecodeStage.READ_LENGTH
        self.offset = 0
        self.header_length = None
        self.header = None
        self.freqs = None
        self.tree = None
        self.output = None

    def run(self):
        handlers = {
            DecodeStage.READ_LENGTH: self._read_length,
            DecodeStage.READ_HEADER: self._read_header,
            DecodeStage.PARSE_HEADER: self._parse_header,
            DecodeStage.REBUILD_TREE: self._rebuild_tree,
            DecodeStage.TRAVERSE_BITS: self._traverse_bits,
        }
        while self.stage is not DecodeStage.DONE:
            current = self.stage
            self.stage = handlers[current]()
            logger.debug("decoder %s -> %s", current.value, self.stage.value)
        return self.output

    def _read_length(self):
        self.header_length, self.offset = read_header_length(self.data)
        return DecodeStage.READ_HEADER

    def _read_header(self):
        self.header, self.offset = read_header_body(self.data, self.header_length, self.offset)
        return DecodeStage.PARSE_HEADER

    def _parse_header(self):
        self.freqs = self.header_codec.parse(self.header)
        return DecodeStage.REBUILD_TREE

    def _rebuild_tree(self):
        self.tree = self.logic.build_tree(self.freqs, require_symbols=True)
        return DecodeStage.TRAVERSE_BITS

    def _traverse_bits(self):
        bits = self.unpacker.unpack(memoryview(self.data)[self.offset:])
        if self.tree.is_degenerate:
            self.output = self._repeat_lone_symbol(bits)
        else:
            self.output = self._walk(bits)
        return DecodeStage.DONE

    def _repeat_lone_symbol(self, bits):
        # A single-leaf tree is written with the 1-bit code "0" per symbol.
        total = self.tree.total
        needed = bits[:total]
        if len(needed) < total:
            raise TruncatedStreamError(f"payload holds {len(needed)} of {total} symbols")
        position = needed.find("1")
        if position != -1:
            raise InvalidTraversalError(f"bit {position} selects a right child of a single-leaf tree")
        return bytes([self.tree.root_node.byte]) * total

    def _walk(self, bits):
        tree = self.tree
        total = tree.total
        lefts = [node.left for node in tree.nodes]
        rights = [node.right for node in tree.nodes]
        symbols = [node.byte for node in tree.nodes]
        root = current = tree.root

        out = bytearray()
        for position, bit in enumerate(bits):
            current = lefts[current] if bit == "0" else rights[current]
            if current is None:
                raise InvalidTraversalError(f"bit {position} points at a missing child")
            symbol = symbols[current]
            if symbol is not None:
                out.append(symbol)
                if len(out) == total:
                    break
                current = root
        else:
            raise TruncatedStreamError(f"payload ran out after {len(out)} of {total} symbols")
        return bytes(out)


class HuffmanService:
    def __init__(self, config=None):
        self.config = config or load_config()
        self.logic = HuffmanLogic()
        self.header_codec = get_header_codec(self.config.header_format)
        self.packer = BitPacker()
        self.unpacker = BitUnpacker()

    def compress(self, data):
        counter = FrequencyCounter()
        data = read_source(data, self.config.chunk_size, counter)
        if not data:
            raise EmptyInputError("cannot compress empty input")
        freqs = counter.table()
        tree = self.logic.build_tree(freqs, require_symbols=True)
        codes = self.logic.encoding_codes(tree)

        encoded_str = "".join(map(codes.__getitem__, data))
        header = frame_header(self.header_codec.serialize(freqs))
        payload = self.packer.pack(encoded_str)
        logger.debug(
            "compressed %d bytes: %d symbols, %d header bytes, %d payload bytes",
            len(data), len(freqs), len(header), len(payload),
        )
        return header + payload

    def decompress(self, data):
        data = read_source(data, self.config.chunk_size)
        decoder = HuffmanDecoder(data, self.header_codec, self.logic, self.unpacker)
        out = decoder.run()
        logger.debug("decompressed %d bytes into %d bytes", len(data), len(out))
        return out


def encode(source, config=None):
    return HuffmanService(config).compress(source)


def decode(source, config=None):
    return HuffmanService(config).decompress(source)
