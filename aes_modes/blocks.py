#== Block helpers =====================================================#
# AES works on fixed 128-bit blocks of bytes. Block sizing and the     #
# XOR helpers shared by the modes of operation live here.              #
#======================================================================#

BLOCK_SIZE = 16 # 128 bits


def as_block(data) -> bytes:
    """Returns data as an immutable 16-byte block, or fails loudly."""
    if len(data) != BLOCK_SIZE:
        raise ValueError(f"Block must be {BLOCK_SIZE} bytes, got {len(data)}")
    return bytes(data)


def xor_bytes(bytes1, bytes2) -> bytes:
    """XORs two messages. Only the length of the shortest one is kept."""
    return bytes(b1 ^ b2 for b1, b2 in zip(bytes1, bytes2))


def inplace_xor_bytes(accumulator: bytearray, operand) -> None:
    """XORs operand into accumulator, which must not be longer than operand."""
    if len(accumulator) > len(operand):
        raise ValueError("Operand is shorter than the accumulator")
    for i in range(len(accumulator)):
        accumulator[i] ^= operand[i]


def blocks_to_bytes(blocks, block_count: int = None) -> bytes:
    """Concatenates a stream of blocks, pre-sizing the output when the count is known."""
    if block_count is None:
        return b"".join(blocks)

    out = bytearray(block_count * BLOCK_SIZE)
    written = 0
    for block in blocks:
        out[written:written + BLOCK_SIZE] = block
        written += BLOCK_SIZE
    del out[written:]
    return bytes(out)
