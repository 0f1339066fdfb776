#== AES key-handle API ================================================#
# HTTP front end for the aes_modes engine. A client opens a key handle #
# (random key, or one derived from a passphrase with SHA-256), then    #
# encrypts and decrypts hex payloads under it in CBC or CTR mode.      #
# Keys never leave the node; only handles and ciphertext do.           #
#======================================================================#

from flask import Flask, jsonify, request
import os
import hashlib
import threading
import argparse # For command-line arguments

import settings
from aes_modes import AES, PKCS7Padding, CiphertextFormatError, cbc_decrypt, cbc_encrypt, ctr
from aes_modes.hexfile import HexFileError, decode_hex

MODES = ("cbc", "ctr")
KEY_LENGTHS_BITS = (128, 192, 256)

# Status codes returned in every JSON body
STATUS_OK = 0
STATUS_MISSING_FIELD = 1
STATUS_INVALID_HANDLE = 2
STATUS_HANDLE_IN_USE = 3
STATUS_INVALID_HEX = 4
STATUS_INVALID_LENGTH = 5
STATUS_BAD_CIPHERTEXT = 6
STATUS_UNKNOWN_MODE = 7

app = Flask(__name__)

# --- Global State ---
config = {} # Will hold runtime configuration
keys = {} # Stores state for each key_handle
keys_lock = threading.Lock() # Guards check-and-insert on keys
# Example key entry:
# {
#   "key_handle_123": {
#     "cipher": AES(...),       # expanded once, reused for every request
#     "key_length_bits": 256,
#     "derived": True / False,  # passphrase-derived or random
#   }
# }
# --- End Global State ---


def generate_key(length_bits, passphrase=None):
    if passphrase is not None:
        # SHA-256 gives 32 bytes, enough for every AES key size
        return hashlib.sha256(passphrase.encode()).digest()[:length_bits // 8]
    return os.urandom(length_bits // 8)


def error(status, message, http_code=400):
    return jsonify({"status": status, "error": message}), http_code


def request_data():
    """JSON body as a dict; an absent body counts as empty, anything but an object is None."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        return None
    return data


def decode_field(data, name, default=""):
    value = data.get(name, default)
    if not isinstance(value, str):
        raise HexFileError(HexFileError.INVALID_CHARS, f"{name} must be a hex string")
    return decode_hex(value)


def lookup_request(data):
    """Resolves key_handle, cipher and mode of an encrypt/decrypt request, or returns an error response."""
    key_handle = data.get("key_handle")
    if not key_handle:
        return None, None, None, error(STATUS_MISSING_FIELD, "Missing key_handle")
    if not isinstance(key_handle, str):
        return None, None, None, error(STATUS_MISSING_FIELD, "key_handle must be a string")
    with keys_lock:
        entry = keys.get(key_handle)
    if entry is None:
        return None, None, None, error(STATUS_INVALID_HANDLE, "Invalid key_handle")

    mode = data.get("mode", config.get("mode", settings.MODE))
    if mode not in MODES:
        return None, None, None, error(STATUS_UNKNOWN_MODE, f"Unknown mode '{mode}'")
    return key_handle, entry["cipher"], mode, None


# --- API Endpoints ---

@app.route('/aes_open', methods=['POST'])
def aes_open():
    data = request_data()
    if data is None:
        return error(STATUS_MISSING_FIELD, "Request body must be a JSON object")
    key_handle = data.get("key_handle")
    length_bits = data.get("key_length_bits", config.get("key_length_bits", settings.KEY_LENGTH_BITS))
    passphrase = data.get("passphrase")

    if key_handle is not None and not isinstance(key_handle, str):
        return error(STATUS_MISSING_FIELD, "key_handle must be a string")
    if passphrase is not None and not isinstance(passphrase, str):
        return error(STATUS_MISSING_FIELD, "passphrase must be a string")
    # bool is an int subclass, and 128.0 == 128 would pass the membership test
    if isinstance(length_bits, bool) or not isinstance(length_bits, int) or length_bits not in KEY_LENGTHS_BITS:
        return error(STATUS_INVALID_LENGTH, f"key_length_bits must be one of {KEY_LENGTHS_BITS}")

    cipher = AES(generate_key(length_bits, passphrase))
    with keys_lock:
        if key_handle and key_handle in keys:
            return error(STATUS_HANDLE_IN_USE, "key_handle already in use")
        elif not key_handle:
            key_handle = os.urandom(8).hex()
        keys[key_handle] = {
            "cipher": cipher,
            "key_length_bits": length_bits,
            "derived": passphrase is not None,
        }
    print(f"[API /aes_open] Opened AES-{length_bits} key for key_handle {key_handle}")
    return jsonify({"key_handle": key_handle, "status": STATUS_OK})


@app.route('/aes_encrypt', methods=['POST'])
def aes_encrypt():
    data = request_data()
    if data is None:
        return error(STATUS_MISSING_FIELD, "Request body must be a JSON object")
    key_handle, cipher, mode, failure = lookup_request(data)
    if failure:
        return failure

    try:
        plaintext = decode_field(data, "data")
        iv = decode_field(data, "iv") if data.get("iv") else os.urandom(16)
    except HexFileError as e:
        return error(STATUS_INVALID_HEX, str(e))
    if len(iv) != 16:
        return error(STATUS_INVALID_LENGTH, f"IV must be 16 bytes, got {len(iv)}")

    if mode == "cbc":
        ciphertext = cbc_encrypt(cipher, iv, PKCS7Padding(plaintext))
    else:
        ciphertext = ctr(cipher, iv, plaintext)

    print(f"[{key_handle}] Encrypted {len(plaintext)} bytes ({mode.upper()}).")
    return jsonify({"iv": iv.hex(), "data": ciphertext.hex(), "status": STATUS_OK})


@app.route('/aes_decrypt', methods=['POST'])
def aes_decrypt():
    data = request_data()
    if data is None:
        return error(STATUS_MISSING_FIELD, "Request body must be a JSON object")
    key_handle, cipher, mode, failure = lookup_request(data)
    if failure:
        return failure
    if not data.get("iv"):
        return error(STATUS_MISSING_FIELD, "Missing iv")

    try:
        ciphertext = decode_field(data, "data")
        iv = decode_field(data, "iv")
    except HexFileError as e:
        return error(STATUS_INVALID_HEX, str(e))
    if len(iv) != 16:
        return error(STATUS_INVALID_LENGTH, f"IV must be 16 bytes, got {len(iv)}")

    if mode == "cbc":
        try:
            plaintext = cbc_decrypt(cipher, iv, ciphertext)
        except CiphertextFormatError as e:
            print(f"[{key_handle}] Warning: rejected ciphertext: {e}")
            return error(STATUS_BAD_CIPHERTEXT, str(e))
    else:
        plaintext = ctr(cipher, iv, ciphertext)

    print(f"[{key_handle}] Decrypted {len(ciphertext)} bytes ({mode.upper()}).")
    return jsonify({"data": plaintext.hex(), "status": STATUS_OK})


@app.route('/aes_close', methods=['POST'])
def aes_close():
    data = request_data()
    if data is None:
        return error(STATUS_MISSING_FIELD, "Request body must be a JSON object")
    key_handle = data.get("key_handle")
    if not isinstance(key_handle, str):
        return error(STATUS_MISSING_FIELD, "key_handle must be a string")

    with keys_lock:
        closed = keys.pop(key_handle, None) is not None
    if closed:
        print(f"[API /aes_close] Closed key_handle {key_handle}.")
        return jsonify({"status": STATUS_OK})
    print(f"[API /aes_close] Invalid or already closed key_handle: {key_handle}.")
    return error(STATUS_INVALID_HANDLE, "Invalid key_handle")

# --- End API Endpoints ---


# --- Main Execution ---
if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="AES Key-Handle API Server")
    parser.add_argument("--host", default=settings.HOST, help=f"Host address to bind to (default: {settings.HOST})")
    parser.add_argument("--port", type=int, default=settings.PORT, help=f"Port to listen on (default: {settings.PORT})")
    parser.add_argument("--key-len", type=int, choices=KEY_LENGTHS_BITS, default=settings.KEY_LENGTH_BITS, help=f"Default key length in bits (default: {settings.KEY_LENGTH_BITS})")
    parser.add_argument("--mode", choices=MODES, default=settings.MODE, help=f"Default mode of operation (default: {settings.MODE})")
    args = parser.parse_args()

    config['my_address'] = args.host
    config['my_port'] = args.port
    config['key_length_bits'] = args.key_len
    config['mode'] = args.mode

    print("--- AES Node Configuration ---")
    for key, value in config.items():
        print(f"  {key}: {value}")
    print("------------------------------")

    print(f"Starting AES API Server on {config['my_address']}:{config['my_port']}")
    try:
        app.run(host=config['my_address'], port=config['my_port'], threaded=True)
    finally:
        print("Server stopped.")
