import argparse

from .aes import AES
from .errors import CiphertextFormatError
from .hexfile import HexFileError, load_bytes, save_bytes
from .modes import cbc_decrypt, cbc_encrypt, ctr
from .padding import PKCS7Padding

# FIPS 197 Appendix C: same plaintext, one key per key size
SELFTEST_PLAINTEXT = bytes.fromhex('00112233445566778899aabbccddeeff')
SELFTEST_VECTORS = [
    ('000102030405060708090a0b0c0d0e0f', '69c4e0d86a7b0430d8cdb78070b4c55a'),
    ('000102030405060708090a0b0c0d0e0f1011121314151617', 'dda97ca4864cdfe06eaf70a0ec0d7191'),
    ('000102030405060708090a0b0c0d0e0f101112131415161718191a1b1c1d1e1f', '8ea2b7ca516745bfeafc49904b496089'),
]


def run_selftest() -> bool:
    all_passed = True
    for key_hex, expected_hex in SELFTEST_VECTORS:
        key = bytes.fromhex(key_hex)
        ciphertext = AES.encrypt(SELFTEST_PLAINTEXT, key)
        dec_text = AES.decrypt(ciphertext, key)
        passed = ciphertext.hex() == expected_hex and dec_text == SELFTEST_PLAINTEXT
        all_passed = all_passed and passed
        print(f"AES-{len(key) * 8}: {'PASS' if passed else 'FAIL'} (ciphertext {ciphertext.hex()})")
    return all_passed


def run_transform(args) -> bytes:
    cipher = AES(load_bytes(args.key))
    iv = load_bytes(args.iv)
    data = load_bytes(args.input)

    if args.mode == 'ctr':
        return ctr(cipher, iv, data)
    if args.command == 'encrypt':
        return cbc_encrypt(cipher, iv, PKCS7Padding(data))
    return cbc_decrypt(cipher, iv, data)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='aes_modes', description="AES-128/192/256 in CBC or CTR mode over hex files")
    subparsers = parser.add_subparsers(dest='command', required=True)

    for command in ('encrypt', 'decrypt'):
        sub = subparsers.add_parser(command, help=f"{command} a hex-encoded file")
        sub.add_argument('--mode', choices=['cbc', 'ctr'], default='cbc', help="Mode of operation (default: cbc)")
        sub.add_argument('--key', required=True, help="Hex file holding a 16, 24 or 32-byte key")
        sub.add_argument('--iv', required=True, help="Hex file holding a 16-byte IV")
        sub.add_argument('--input', required=True, help="Hex file to read")
        sub.add_argument('--output', required=True, help="Hex file to write")

    subparsers.add_parser('selftest', help="Check the FIPS 197 example vectors")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == 'selftest':
        return 0 if run_selftest() else 1

    try:
        output = run_transform(args)
        save_bytes(args.output, output)
    except HexFileError as e:
        print(f"Error: {e} ({e.reason})")
        return 1
    except CiphertextFormatError as e:
        print(f"Error: invalid ciphertext: {e}")
        return 1
    except ValueError as e:
        # wrong key or IV size read from the files
        print(f"Error: {e}")
        return 1

    print(f"{args.command.capitalize()}ed {args.input} -> {args.output} ({len(output)} bytes, {args.mode.upper()})")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
