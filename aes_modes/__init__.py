"""
AES block cipher with CBC and CTR modes of operation.

Written for learning purposes: nothing here is constant-time and secrets are
not wiped from memory, so do not use it to protect real data.
"""

from .aes import AES, State
from .block_cipher import BlockCipher
from .blocks import BLOCK_SIZE
from .errors import CiphertextFormatError
from .gf2_math import GF2Element, GF2Word
from .modes import cbc_decrypt, cbc_encrypt, ctr
from .padding import PKCS7Padding, PaddingScheme, pkcs7_unpad

__all__ = [
    "AES",
    "BLOCK_SIZE",
    "BlockCipher",
    "CiphertextFormatError",
    "GF2Element",
    "GF2Word",
    "PKCS7Padding",
    "PaddingScheme",
    "State",
    "cbc_decrypt",
    "cbc_encrypt",
    "ctr",
    "pkcs7_unpad",
]
