#== Padding schemes ===================================================#
# A padding scheme turns an arbitrary message into a stream of whole   #
# blocks a block cipher can consume. Only PKCS#7 is provided.          #
#======================================================================#

from abc import ABC, abstractmethod

from .blocks import BLOCK_SIZE
from .errors import CiphertextFormatError


class PaddingScheme(ABC):
    """
    Iterating yields 16-byte blocks from the start of the message every time,
    and len() is the exact number of blocks, known before iterating.
    """

    def __init__(self, message: bytes):
        self.message = bytes(message)

    @abstractmethod
    def __iter__(self):
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class PKCS7Padding(PaddingScheme):

    def __iter__(self):
        final_block_sent = False
        for start in range(0, len(self.message), BLOCK_SIZE):
            chunk = self.message[start:start + BLOCK_SIZE]
            remaining = BLOCK_SIZE - len(chunk)
            if remaining > 0:
                chunk += bytes([remaining]) * remaining
                final_block_sent = True
            yield chunk

        # messages that fill their last block get a whole block of padding
        if not final_block_sent:
            yield bytes([BLOCK_SIZE]) * BLOCK_SIZE

    def __len__(self) -> int:
        return len(self.message) // BLOCK_SIZE + 1


def pkcs7_unpad(data: bytes) -> bytes:
    """
    Drops as many trailing bytes as the last byte says. The other padding
    bytes are not checked.
    """
    if not data:
        raise CiphertextFormatError("Cannot unpad an empty message")
    padding_bytes = data[-1]
    if padding_bytes > len(data):
        raise CiphertextFormatError(f"Padding length {padding_bytes} exceeds message length {len(data)}")
    return bytes(data[:len(data) - padding_bytes])
