from .block_cipher import BlockCipher
from .blocks import BLOCK_SIZE
from .gf2_math import GF2Element, GF2Word

Nb = 4 # columns in the state, always 4 for AES

class AES(BlockCipher):
    """
    AES (FIPS 197) for 128, 192 and 256-bit keys.

    An instance bundles one expanded key, so it can be handed to the modes of
    operation as a BlockCipher. The static methods expose the key schedule and
    the cipher round loop directly.
    """
    S_BOX = [
        [0x63, 0x7C, 0x77, 0x7B, 0xF2, 0x6B, 0x6F, 0xC5, 0x30, 0x01, 0x67, 0x2B, 0xFE, 0xD7, 0xAB, 0x76],
        [0xCA, 0x82, 0xC9, 0x7D, 0xFA, 0x59, 0x47, 0xF0, 0xAD, 0xD4, 0xA2, 0xAF, 0x9C, 0xA4, 0x72, 0xC0],
        [0xB7, 0xFD, 0x93, 0x26, 0x36, 0x3F, 0xF7, 0xCC, 0x34, 0xA5, 0xE5, 0xF1, 0x71, 0xD8, 0x31, 0x15],
        [0x04, 0xC7, 0x23, 0xC3, 0x18, 0x96, 0x05, 0x9A, 0x07, 0x12, 0x80, 0xE2, 0xEB, 0x27, 0xB2, 0x75],
        [0x09, 0x83, 0x2C, 0x1A, 0x1B, 0x6E, 0x5A, 0xA0, 0x52, 0x3B, 0xD6, 0xB3, 0x29, 0xE3, 0x2F, 0x84],
        [0x53, 0xD1, 0x00, 0xED, 0x20, 0xFC, 0xB1, 0x5B, 0x6A, 0xCB, 0xBE, 0x39, 0x4A, 0x4C, 0x58, 0xCF],
        [0xD0, 0xEF, 0xAA, 0xFB, 0x43, 0x4D, 0x33, 0x85, 0x45, 0xF9, 0x02, 0x7F, 0x50, 0x3C, 0x9F, 0xA8],
        [0x51, 0xA3, 0x40, 0x8F, 0x92, 0x9D, 0x38, 0xF5, 0xBC, 0xB6, 0xDA, 0x21, 0x10, 0xFF, 0xF3, 0xD2],
        [0xCD, 0x0C, 0x13, 0xEC, 0x5F, 0x97, 0x44, 0x17, 0xC4, 0xA7, 0x7E, 0x3D, 0x64, 0x5D, 0x19, 0x73],
        [0x60, 0x81, 0x4F, 0xDC, 0x22, 0x2A, 0x90, 0x88, 0x46, 0xEE, 0xB8, 0x14, 0xDE, 0x5E, 0x0B, 0xDB],
        [0xE0, 0x32, 0x3A, 0x0A, 0x49, 0x06, 0x24, 0x5C, 0xC2, 0xD3, 0xAC, 0x62, 0x91, 0x95, 0xE4, 0x79],
        [0xE7, 0xC8, 0x37, 0x6D, 0x8D, 0xD5, 0x4E, 0xA9, 0x6C, 0x56, 0xF4, 0xEA, 0x65, 0x7A, 0xAE, 0x08],
        [0xBA, 0x78, 0x25, 0x2E, 0x1C, 0xA6, 0xB4, 0xC6, 0xE8, 0xDD, 0x74, 0x1F, 0x4B, 0xBD, 0x8B, 0x8A],
        [0x70, 0x3E, 0xB5, 0x66, 0x48, 0x03, 0xF6, 0x0E, 0x61, 0x35, 0x57, 0xB9, 0x86, 0xC1, 0x1D, 0x9E],
        [0xE1, 0xF8, 0x98, 0x11, 0x69, 0xD9, 0x8E, 0x94, 0x9B, 0x1E, 0x87, 0xE9, 0xCE, 0x55, 0x28, 0xDF],
        [0x8C, 0xA1, 0x89, 0x0D, 0xBF, 0xE6, 0x42, 0x68, 0x41, 0x99, 0x2D, 0x0F, 0xB0, 0x54, 0xBB, 0x16]
    ]

    INV_S_BOX = [
        [0x52, 0x09, 0x6A, 0xD5, 0x30, 0x36, 0xA5, 0x38, 0xBF, 0x40, 0xA3, 0x9E, 0x81, 0xF3, 0xD7, 0xFB],
        [0x7C, 0xE3, 0x39, 0x82, 0x9B, 0x2F, 0xFF, 0x87, 0x34, 0x8E, 0x43, 0x44, 0xC4, 0xDE, 0xE9, 0xCB],
        [0x54, 0x7B, 0x94, 0x32, 0xA6, 0xC2, 0x23, 0x3D, 0xEE, 0x4C, 0x95, 0x0B, 0x42, 0xFA, 0xC3, 0x4E],
        [0x08, 0x2E, 0xA1, 0x66, 0x28, 0xD9, 0x24, 0xB2, 0x76, 0x5B, 0xA2, 0x49, 0x6D, 0x8B, 0xD1, 0x25],
        [0x72, 0xF8, 0xF6, 0x64, 0x86, 0x68, 0x98, 0x16, 0xD4, 0xA4, 0x5C, 0xCC, 0x5D, 0x65, 0xB6, 0x92],
        [0x6C, 0x70, 0x48, 0x50, 0xFD, 0xED, 0xB9, 0xDA, 0x5E, 0x15, 0x46, 0x57, 0xA7, 0x8D, 0x9D, 0x84],
        [0x90, 0xD8, 0xAB, 0x00, 0x8C, 0xBC, 0xD3, 0x0A, 0xF7, 0xE4, 0x58, 0x05, 0xB8, 0xB3, 0x45, 0x06],
        [0xD0, 0x2C, 0x1E, 0x8F, 0xCA, 0x3F, 0x0F, 0x02, 0xC1, 0xAF, 0xBD, 0x03, 0x01, 0x13, 0x8A, 0x6B],
        [0x3A, 0x91, 0x11, 0x41, 0x4F, 0x67, 0xDC, 0xEA, 0x97, 0xF2, 0xCF, 0xCE, 0xF0, 0xB4, 0xE6, 0x73],
        [0x96, 0xAC, 0x74, 0x22, 0xE7, 0xAD, 0x35, 0x85, 0xE2, 0xF9, 0x37, 0xE8, 0x1C, 0x75, 0xDF, 0x6E],
        [0x47, 0xF1, 0x1A, 0x71, 0x1D, 0x29, 0xC5, 0x89, 0x6F, 0xB7, 0x62, 0x0E, 0xAA, 0x18, 0xBE, 0x1B],
        [0xFC, 0x56, 0x3E, 0x4B, 0xC6, 0xD2, 0x79, 0x20, 0x9A, 0xDB, 0xC0, 0xFE, 0x78, 0xCD, 0x5A, 0xF4],
        [0x1F, 0xDD, 0xA8, 0x33, 0x88, 0x07, 0xC7, 0x31, 0xB1, 0x12, 0x10, 0x59, 0x27, 0x80, 0xEC, 0x5F],
        [0x60, 0x51, 0x7F, 0xA9, 0x19, 0xB5, 0x4A, 0x0D, 0x2D, 0xE5, 0x7A, 0x9F, 0x93, 0xC9, 0x9C, 0xEF],
        [0xA0, 0xE0, 0x3B, 0x4D, 0xAE, 0x2A, 0xF5, 0xB0, 0xC8, 0xEB, 0xBB, 0x3C, 0x83, 0x53, 0x99, 0x61],
        [0x17, 0x2B, 0x04, 0x7E, 0xBA, 0x77, 0xD6, 0x26, 0xE1, 0x69, 0x14, 0x63, 0x55, 0x21, 0x0C, 0x7D]
    ]

    # index 0 is never used: the key schedule starts at i / Nk == 1
    RCON = [0x00, 0x01, 0x02, 0x04, 0x08, 0x10, 0x20, 0x40, 0x80, 0x1B, 0x36]

    MIX_COLUMNS_WORD = GF2Word(0x02, 0x01, 0x01, 0x03)     # 3x^3 + x^2 + x + 2
    INV_MIX_COLUMNS_WORD = GF2Word(0x0E, 0x09, 0x0D, 0x0B) # 0bx^3 + 0dx^2 + 09x + 0e

    KEY_SIZES = (16, 24, 32)

    def __init__(self, key: bytes):
        self.round_keys = AES.key_expansion(key)
        self.rounds = len(self.round_keys) // Nb - 1

    def encrypt_block(self, block: bytes) -> bytes:
        return AES.cipher(block, self.round_keys)

    def decrypt_block(self, block: bytes) -> bytes:
        return AES.inv_cipher(block, self.round_keys)

    #
    # KEY MANAGEMENT METHODS
    #
    @staticmethod
    def key_expansion(key: bytes) -> (GF2Word,):
        if len(key) not in AES.KEY_SIZES:
            raise ValueError(f"Key must be 16, 24 or 32 bytes, got {len(key)}")

        Nk = len(key) // 4
        Nr = Nk + 6
        expanded_words = [None] * (Nb * (Nr + 1))

        # First Nk words are the key itself
        for i in range(Nk):
            expanded_words[i] = GF2Word(key[4 * i], key[4 * i + 1], key[4 * i + 2], key[4 * i + 3])

        for i in range(Nk, Nb * (Nr + 1)):
            temp = expanded_words[i - 1]
            if i % Nk == 0:
                temp = temp.rot_word().substitute(AES.S_BOX)
                temp = temp.add(GF2Word(AES.RCON[i // Nk], 0, 0, 0))
            elif Nk > 6 and i % Nk == 4:
                temp = temp.substitute(AES.S_BOX)

            # XOR with the word Nk positions back
            expanded_words[i] = expanded_words[i - Nk].add(temp)

        return tuple(expanded_words)

    @staticmethod
    def round_count(round_keys) -> int:
        if len(round_keys) % Nb != 0 or len(round_keys) <= Nb:
            raise ValueError(f"Round keys must be a multiple of {Nb} words longer than {Nb}, got {len(round_keys)}")
        return len(round_keys) // Nb - 1

    #
    # ENCRYPT METHODS
    #
    @staticmethod
    def cipher(block: bytes, round_keys) -> bytes:
        Nr = AES.round_count(round_keys)
        state = State.from_bytes(block)

        # Initial round
        state.add_round_key(round_keys[0:Nb])

        # Main rounds (1 to Nr - 1)
        for round_num in range(1, Nr):
            state.sub_bytes()
            state.shift_rows()
            state.mix_columns()
            state.add_round_key(round_keys[round_num * Nb:(round_num + 1) * Nb])

        # Final round, without MixColumns
        state.sub_bytes()
        state.shift_rows()
        state.add_round_key(round_keys[Nr * Nb:(Nr + 1) * Nb])

        return state.to_bytes()

    @staticmethod
    def encrypt(plaintext: bytes, key: bytes) -> bytes:
        return AES.cipher(plaintext, AES.key_expansion(key))

    #
    # DECRYPT METHODS
    #
    @staticmethod
    def inv_cipher(block: bytes, round_keys) -> bytes:
        Nr = AES.round_count(round_keys)
        state = State.from_bytes(block)

        # Initial AddRoundKey (using last round key)
        state.add_round_key(round_keys[Nr * Nb:(Nr + 1) * Nb])

        # Main rounds (Nr - 1 down to 1)
        for round_num in range(Nr - 1, 0, -1):
            state.inv_shift_rows()
            state.inv_sub_bytes()
            state.add_round_key(round_keys[round_num * Nb:(round_num + 1) * Nb])
            state.inv_mix_columns()

        # Final round (Round 0)
        state.inv_shift_rows()
        state.inv_sub_bytes()
        state.add_round_key(round_keys[0:Nb])

        return state.to_bytes()

    @staticmethod
    def decrypt(ciphertext: bytes, key: bytes) -> bytes:
        return AES.inv_cipher(ciphertext, AES.key_expansion(key))


class State:
    """
    The 4x4 byte state, stored as Nb column words: word c holds rows 0..3
    of column c, which is also the order of the bytes in a block.
    """

    def __init__(self, words: [GF2Word]):
        if len(words) != Nb:
            raise ValueError(f"State holds exactly {Nb} words")
        self.words = list(words)

    @staticmethod
    def from_bytes(block: bytes) -> "State":
        if len(block) != BLOCK_SIZE:
            raise ValueError(f"Block must be {BLOCK_SIZE} bytes, got {len(block)}")
        return State([GF2Word(*block[4 * c:4 * c + 4]) for c in range(Nb)])

    def to_bytes(self) -> bytes:
        return b"".join(word.to_bytes() for word in self.words)

    def get(self, row: int, column: int) -> GF2Element:
        return self.words[column][row]

    def set(self, row: int, column: int, value: GF2Element):
        self.words[column] = self.words[column].with_byte(row, value)

    def sub_bytes(self):
        self.words = [word.substitute(AES.S_BOX) for word in self.words]

    def inv_sub_bytes(self):
        self.words = [word.substitute(AES.INV_S_BOX) for word in self.words]

    def shift_rows(self):
        for row in range(1, 4):
            self._rotate_row(row, row)

    def inv_shift_rows(self):
        for row in range(1, 4):
            self._rotate_row(row, -row)

    def mix_columns(self):
        self.words = [word.multiply(AES.MIX_COLUMNS_WORD) for word in self.words]

    def inv_mix_columns(self):
        self.words = [word.multiply(AES.INV_MIX_COLUMNS_WORD) for word in self.words]

    def add_round_key(self, round_key: [GF2Word]):
        if len(round_key) != Nb:
            raise ValueError(f"A round key is exactly {Nb} words, got {len(round_key)}")
        self.words = [word.add(key) for word, key in zip(self.words, round_key)]

    def _rotate_row(self, row: int, amount: int):
        # positive amounts rotate left, negative ones right
        line = [self.get(row, column) for column in range(Nb)]
        for column in range(Nb):
            self.set(row, column, line[(column + amount) % Nb])

    def __str__(self) -> str:
        return " ".join(str(word) for word in self.words)
