#== Modes of operation ================================================#
# Turns a keyed BlockCipher into a transform over byte streams. Both   #
# modes take the IV explicitly: picking a fresh one per message is the #
# caller's job, nothing here detects IV or key reuse.                  #
#======================================================================#

from .block_cipher import BlockCipher
from .blocks import BLOCK_SIZE, as_block, blocks_to_bytes, inplace_xor_bytes, xor_bytes
from .errors import CiphertextFormatError
from .padding import PaddingScheme, pkcs7_unpad

COUNTER_MODULUS = 1 << (8 * BLOCK_SIZE)


def check_block_size(cipher: BlockCipher):
    if cipher.block_size != BLOCK_SIZE:
        raise ValueError(f"Modes work on {BLOCK_SIZE}-byte blocks, cipher uses {cipher.block_size}")


def cbc_encrypt(cipher: BlockCipher, iv: bytes, padded_input: PaddingScheme) -> bytes:
    """
    Cipher Block Chaining. Each padded block is XORed with the previous
    ciphertext block (the IV for the first one) before being encrypted.
    """
    check_block_size(cipher)
    last_ciphertext = as_block(iv)

    def chain():
        nonlocal last_ciphertext
        for block in padded_input:
            last_ciphertext = cipher.encrypt_block(xor_bytes(block, last_ciphertext))
            yield last_ciphertext

    return blocks_to_bytes(chain(), len(padded_input))


def cbc_decrypt(cipher: BlockCipher, iv: bytes, ciphertext: bytes) -> bytes:
    """
    Inverse of cbc_encrypt, PKCS#7 padding removed. The padding length is
    read from the last byte and trusted as is.
    """
    check_block_size(cipher)
    last_ciphertext = as_block(iv)
    if len(ciphertext) % BLOCK_SIZE != 0:
        raise CiphertextFormatError(f"Ciphertext length {len(ciphertext)} is not a multiple of {BLOCK_SIZE}")
    if not ciphertext:
        raise CiphertextFormatError("Ciphertext is empty")

    plaintext = bytearray()
    for start in range(0, len(ciphertext), BLOCK_SIZE):
        ciphertext_block = bytes(ciphertext[start:start + BLOCK_SIZE])
        decrypted = bytearray(cipher.decrypt_block(ciphertext_block))
        inplace_xor_bytes(decrypted, last_ciphertext)
        plaintext.extend(decrypted)
        last_ciphertext = ciphertext_block # chain on ciphertext, not plaintext

    return pkcs7_unpad(plaintext)


def increment_counter(counter: bytes) -> bytes:
    """Adds one to a big-endian 128-bit counter, wrapping around to zero."""
    value = (int.from_bytes(counter, "big") + 1) % COUNTER_MODULUS
    return value.to_bytes(BLOCK_SIZE, "big")


def ctr(cipher: BlockCipher, iv: bytes, data: bytes) -> bytes:
    """
    Counter mode. The encrypted counter is a one-time pad XORed with the
    input, so the same call both encrypts and decrypts and the final chunk
    may be shorter than a block.
    """
    check_block_size(cipher)
    counter = as_block(iv)
    output = bytearray()
    for start in range(0, len(data), BLOCK_SIZE):
        chunk = data[start:start + BLOCK_SIZE]
        one_time_pad = cipher.encrypt_block(counter)
        output.extend(xor_bytes(chunk, one_time_pad))
        counter = increment_counter(counter)
    return bytes(output)
