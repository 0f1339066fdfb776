class CiphertextFormatError(Exception):
    """
    Raised when ciphertext handed to a decryption routine is malformed, e.g.
    not a whole number of blocks. Not a ValueError: ValueError is reserved
    for callers breaking the contract of the cipher (bad key, block or IV size).
    """
    pass
