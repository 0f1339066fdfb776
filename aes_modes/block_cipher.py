#== Keyed block cipher interface ======================================#
# Modes of operation only need a keyed permutation of 16-byte blocks.  #
# Any cipher bundled with its key schedule can implement this class    #
# and be handed to cbc_encrypt, cbc_decrypt or ctr.                    #
#======================================================================#

from abc import ABC, abstractmethod


class BlockCipher(ABC):
    block_size = 16

    @abstractmethod
    def encrypt_block(self, block: bytes) -> bytes:
        pass

    @abstractmethod
    def decrypt_block(self, block: bytes) -> bytes:
        pass
