"""MD2 message digest (RFC 1319).

This module provides a small, readable implementation of the MD2 hash. The
implementation is stateful: the checksum C, the carry byte L and the 48-byte
mixing state X are updated as 16-byte blocks are processed.

MD2 is broken for collision resistance and is kept only for interoperability
with legacy formats that still reference it.
"""
import logging

logger = logging.getLogger(__name__)


class MD2:

    # Substitution table built from the digits of pi (RFC 1319, section 3.3)
    S_table = (
        0x29, 0x2E, 0x43, 0xC9, 0xA2, 0xD8, 0x7C, 0x01,
        0x3D, 0x36, 0x54, 0xA1, 0xEC, 0xF0, 0x06, 0x13,
        0x62, 0xA7, 0x05, 0xF3, 0xC0, 0xC7, 0x73, 0x8C,
        0x98, 0x93, 0x2B, 0xD9, 0xBC, 0x4C, 0x82, 0xCA,
        0x1E, 0x9B, 0x57, 0x3C, 0xFD, 0xD4, 0xE0, 0x16,
        0x67, 0x42, 0x6F, 0x18, 0x8A, 0x17, 0xE5, 0x12,
        0xBE, 0x4E, 0xC4, 0xD6, 0xDA, 0x9E, 0xDE, 0x49,
        0xA0, 0xFB, 0xF5, 0x8E, 0xBB, 0x2F, 0xEE, 0x7A,
        0xA9, 0x68, 0x79, 0x91, 0x15, 0xB2, 0x07, 0x3F,
        0x94, 0xC2, 0x10, 0x89, 0x0B, 0x22, 0x5F, 0x21,
        0x80, 0x7F, 0x5D, 0x9A, 0x5A, 0x90, 0x32, 0x27,
        0x35, 0x3E, 0xCC, 0xE7, 0xBF, 0xF7, 0x97, 0x03,
        0xFF, 0x19, 0x30, 0xB3, 0x48, 0xA5, 0xB5, 0xD1,
        0xD7, 0x5E, 0x92, 0x2A, 0xAC, 0x56, 0xAA, 0xC6,
        0x4F, 0xB8, 0x38, 0xD2, 0x96, 0xA4, 0x7D, 0xB6,
        0x76, 0xFC, 0x6B, 0xE2, 0x9C, 0x74, 0x04, 0xF1,
        0x45, 0x9D, 0x70, 0x59, 0x64, 0x71, 0x87, 0x20,
        0x86, 0x5B, 0xCF, 0x65, 0xE6, 0x2D, 0xA8, 0x02,
        0x1B, 0x60, 0x25, 0xAD, 0xAE, 0xB0, 0xB9, 0xF6,
        0x1C, 0x46, 0x61, 0x69, 0x34, 0x40, 0x7E, 0x0F,
        0x55, 0x47, 0xA3, 0x23, 0xDD, 0x51, 0xAF, 0x3A,
        0xC3, 0x5C, 0xF9, 0xCE, 0xBA, 0xC5, 0xEA, 0x26,
        0x2C, 0x53, 0x0D, 0x6E, 0x85, 0x28, 0x84, 0x09,
        0xD3, 0xDF, 0xCD, 0xF4, 0x41, 0x81, 0x4D, 0x52,
        0x6A, 0xDC, 0x37, 0xC8, 0x6C, 0xC1, 0xAB, 0xFA,
        0x24, 0xE1, 0x7B, 0x08, 0x0C, 0xBD, 0xB1, 0x4A,
        0x78, 0x88, 0x95, 0x8B, 0xE3, 0x63, 0xE8, 0x6D,
        0xE9, 0xCB, 0xD5, 0xFE, 0x3B, 0x00, 0x1D, 0x39,
        0xF2, 0xEF, 0xB7, 0x0E, 0x66, 0x58, 0xD0, 0xE4,
        0xA6, 0x77, 0x72, 0xF8, 0xEB, 0x75, 0x4B, 0x0A,
        0x31, 0x44, 0x50, 0xB4, 0x8F, 0xED, 0x1F, 0x1A,
        0xDB, 0x99, 0x8D, 0x33, 0x9F, 0x11, 0x83, 0x14,
    )

    name = "MD2"
    digest_size = 16
    block_size = 16
    num_rounds = 18

    # iso.member-body.us.rsadsi.digestAlgorithm.md2
    OID = "1.2.840.113549.2.2"
    # DER DigestInfo header preceding the 16 digest bytes in a signature
    ASN_PREFIX = bytes([0x30, 0x20, 0x30, 0x0c, 0x06, 0x08, 0x2a, 0x86, 0x48,
                        0x86, 0xf7, 0x0d, 0x02, 0x02, 0x05, 0x00, 0x04, 0x10])

    def __init__(self):
        """Initialize to the all-zero MD2 context."""
        self.md2_init()

    def md2_init(self):
        """Zero the checksum, the carry byte and the mixing state."""
        self.C = bytearray(16)
        self.L = 0
        self.X = bytearray(48)

    @staticmethod
    def permute(X, block):
        """Mix a 16-byte block into the 48-byte state X in place.

        X is split into three lanes: X[0:16] is the hash state, X[16:32]
        receives the block and X[32:48] their xor. The 18 rounds then run a
        single accumulator t through the substitution table over all 48
        bytes; t is only reset once per call, not per round.
        """
        assert len(X) == 48
        assert len(block) == 16
        S = MD2.S_table
        X[16:32] = block
        for i in range(16):
            X[32 + i] = X[16 + i] ^ X[i]

        t = 0
        for i in range(MD2.num_rounds):
            for j in range(48):
                t = X[j] ^ S[t]
                X[j] = t
            t = (t + i) & 0xff
        # scrub the accumulator
        t = 0

    def md2_block(self, block):
        """Process one 16-byte block: update the checksum, then permute."""
        assert len(block) == 16
        S = MD2.S_table
        C = self.C
        L = self.L
        for j in range(16):
            C[j] ^= S[block[j] ^ L]
            L = C[j]
        self.L = L

        MD2.permute(self.X, block)

    def md2_blocks(self, data):
        """Process consecutive 16-byte blocks of data in order."""
        assert len(data) % 16 == 0
        for i in range(0, len(data), 16):
            self.md2_block(data[i:i+16])

    @staticmethod
    def md2_pad(tail):
        """Return the final block: tail followed by its MD2 padding.

        tail holds the 0..15 bytes left over after the last full block. The
        pad is n bytes of value n with n = 16 - len(tail), so block-aligned
        input still gets a whole block of 0x10.
        """
        assert len(tail) < 16
        pad_len = 16 - len(tail)
        return bytes(tail) + bytes([pad_len]) * pad_len

    @staticmethod
    def md2_padded(input_bytes):
        """Return input_bytes padded to a multiple of 16 bytes per MD2."""
        split = len(input_bytes) - len(input_bytes) % 16
        return bytes(input_bytes[:split]) + MD2.md2_pad(input_bytes[split:])

    def md2_final(self, tail=b""):
        """Pad and absorb the leftover bytes, then fold in the checksum.

        Must be called exactly once; afterwards only md2_read is valid.
        """
        block = bytearray(MD2.md2_pad(tail))
        self.md2_block(block)
        MD2.permute(self.X, self.C)
        block[:] = bytes(16)
        logger.debug("md2 final digest %s", self.X[:16].hex())

    def md2_read(self):
        """Return the digest, the first 16 bytes of X."""
        return bytes(self.X[:16])

    def md2_digest(self, input_bytes):
        """Compute the MD2 digest of input_bytes as 16 bytes.

        Full blocks are absorbed directly and the remainder is handed to
        md2_final. The context is consumed; use a fresh MD2 per message.
        """
        split = len(input_bytes) - len(input_bytes) % 16
        self.md2_blocks(input_bytes[:split])
        self.md2_final(input_bytes[split:])
        return self.md2_read()

    def md2_hexdigest(self, input_bytes):
        return self.md2_digest(input_bytes).hex()


def md2(data):
    """Return the MD2 digest of data computed with a fresh context."""
    return MD2().md2_digest(data)
