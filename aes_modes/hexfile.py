#== Hex files =========================================================#
# Keys, IVs and ciphertexts travel as hex text files. These helpers    #
# load such a file into bytes and write bytes back out as hex.         #
#======================================================================#

import string

HEX_DIGITS = set(string.hexdigits)


class HexFileError(Exception):
    LOADING = "loading"
    SAVING = "saving"
    ODD_LENGTH = "odd_length"
    INVALID_CHARS = "invalid_chars"

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


def decode_hex(text: str) -> bytes:
    text = text.rstrip()
    if len(text) % 2 != 0:
        raise HexFileError(HexFileError.ODD_LENGTH, f"Odd number of hex digits ({len(text)})")
    if not all(c in HEX_DIGITS for c in text):
        raise HexFileError(HexFileError.INVALID_CHARS, "Input contains non-hexadecimal characters")
    return bytes.fromhex(text)


def load_bytes(filename: str) -> bytes:
    try:
        with open(filename, "r", encoding="utf-8") as f:
            raw_str = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise HexFileError(HexFileError.LOADING, f"Could not read {filename}: {e}") from e
    return decode_hex(raw_str)


def save_bytes(filename: str, data: bytes):
    try:
        with open(filename, "w", encoding="utf-8") as f:
            f.write(bytes(data).hex() + "\n")
    except OSError as e:
        raise HexFileError(HexFileError.SAVING, f"Could not write {filename}: {e}") from e
