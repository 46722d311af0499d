# filename: bit_packing.py

import logging

logger = logging.getLogger(__name__)

_BYTE_BITS = [f"{value:08b}" for value in range(256)]


class BitPacker:
    @staticmethod
    def padding_for(bit_count):
        return -bit_count % 8

    def pack(self, bits):
        """Pack a "0"/"1" string MSB-first, zero padding the final byte."""
        if not bits:
            return b""
        padding = self.padding_for(len(bits))
        bits += "0" * padding
        packed = int(bits, 2).to_bytes(len(bits) // 8, "big")
        logger.debug("packed %d bits into %d bytes (%d padding bits)", len(bits) - padding, len(packed), padding)
        return packed


class BitUnpacker:
    def unpack(self, data):
        """Expand each byte into its 8 bits, most significant first."""
        return "".join(map(_BYTE_BITS.__getitem__, data))
