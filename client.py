#== AES key-handle client =============================================#
# Thin requests wrapper around the aes_api_node endpoints. Run as a    #
# script it does an open / encrypt / decrypt / close round trip.       #
#======================================================================#

import requests
import argparse

import settings


class NodeError(Exception):
    def __init__(self, status, message):
        super().__init__(f"status {status}: {message}")
        self.status = status


def _post(url, endpoint, payload, timeout=settings.REQUEST_TIMEOUT):
    response = requests.post(f"{url}/{endpoint}", json=payload, timeout=timeout)
    try:
        body = response.json()
    except ValueError:
        raise NodeError(None, f"Non-JSON response from /{endpoint} (HTTP {response.status_code})")
    if response.status_code != 200 or body.get("status") != 0:
        raise NodeError(body.get("status"), body.get("error", "Unknown error"))
    return body


def open_key(url, key_handle=None, key_length_bits=None, passphrase=None):
    payload = {}
    if key_handle:
        payload["key_handle"] = key_handle
    if key_length_bits:
        payload["key_length_bits"] = key_length_bits
    if passphrase is not None:
        payload["passphrase"] = passphrase
    return _post(url, "aes_open", payload)["key_handle"]


def encrypt(url, key_handle, plaintext: bytes, mode="cbc", iv: bytes = None):
    """Returns (iv, ciphertext). The node picks a random IV when none is given."""
    payload = {"key_handle": key_handle, "mode": mode, "data": plaintext.hex()}
    if iv is not None:
        payload["iv"] = iv.hex()
    body = _post(url, "aes_encrypt", payload)
    return bytes.fromhex(body["iv"]), bytes.fromhex(body["data"])


def decrypt(url, key_handle, ciphertext: bytes, iv: bytes, mode="cbc") -> bytes:
    payload = {"key_handle": key_handle, "mode": mode, "data": ciphertext.hex(), "iv": iv.hex()}
    return bytes.fromhex(_post(url, "aes_decrypt", payload)["data"])


def close_key(url, key_handle):
    _post(url, "aes_close", {"key_handle": key_handle})


def round_trip(url, message: bytes, mode="cbc", key_length_bits=None) -> bool:
    print("Step 1: Opening key handle...")
    key_handle = open_key(url, key_length_bits=key_length_bits)
    print(f"  Key Handle: {key_handle}")

    try:
        print(f"\nStep 2: Encrypting {len(message)} bytes ({mode.upper()})...")
        iv, ciphertext = encrypt(url, key_handle, message, mode=mode)
        print(f"  IV:         {iv.hex()}")
        print(f"  Ciphertext: {ciphertext.hex()[:64]}...")

        print("\nStep 3: Decrypting...")
        recovered = decrypt(url, key_handle, ciphertext, iv, mode=mode)
        success = recovered == message
        print("  Plaintexts MATCH!" if success else "  ERROR: Plaintexts DO NOT MATCH!")
    finally:
        print("\nStep 4: Closing key handle...")
        close_key(url, key_handle)

    return success


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="AES Key-Handle API round trip")
    parser.add_argument("--url", default=settings.NODE_URL, help=f"Node URL (default: {settings.NODE_URL})")
    parser.add_argument("--mode", choices=["cbc", "ctr"], default=settings.MODE)
    parser.add_argument("--key-len", type=int, choices=[128, 192, 256], default=settings.KEY_LENGTH_BITS)
    parser.add_argument("--message", default="The quick brown fox jumps over the lazy dog")
    args = parser.parse_args()

    try:
        ok = round_trip(args.url, args.message.encode(), mode=args.mode, key_length_bits=args.key_len)
    except requests.exceptions.RequestException as e:
        print(f"Error contacting node: {e}")
        exit(1)
    except NodeError as e:
        print(f"Node reported an error: {e}")
        exit(1)

    print("\nSuccess!" if ok else "\nFailed!")
    exit(0 if ok else 1)
