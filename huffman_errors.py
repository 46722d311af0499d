# filename: huffman_errors.py


class HuffmanError(Exception):
    """Base class for every codec failure surfaced to the caller."""


class EmptyInputError(HuffmanError):
    """The frequency table has no entries, so no tree can be built."""


class MalformedHeaderError(HuffmanError):
    """The header body is not a well-formed frequency table."""


class TruncatedStreamError(HuffmanError):
    """The stream ended before the header or the payload was complete."""


class InvalidTraversalError(HuffmanError):
    """A payload bit pointed at a child the tree does not have."""
