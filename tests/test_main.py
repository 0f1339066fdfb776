"""Tests for the command-line interface."""

import pytest

from aes_modes.main import main


@pytest.fixture
def hex_files(tmp_path):
    def write(name, data):
        path = tmp_path / name
        path.write_text(bytes(data).hex() + "\n")
        return str(path)

    return write


class TestEncryptDecrypt:

    @pytest.mark.parametrize("mode", ["cbc", "ctr"])
    @pytest.mark.parametrize("key_length", [16, 24, 32])
    def test_round_trip(self, tmp_path, hex_files, mode, key_length):
        message = b"Hex files in, hex files out."
        key = hex_files("key.hex", range(key_length))
        iv = hex_files("iv.hex", range(100, 116))
        plain = hex_files("plain.hex", message)
        encrypted = str(tmp_path / "cipher.hex")
        decrypted = str(tmp_path / "decrypted.hex")

        assert main(["encrypt", "--mode", mode, "--key", key, "--iv", iv, "--input", plain, "--output", encrypted]) == 0
        assert main(["decrypt", "--mode", mode, "--key", key, "--iv", iv, "--input", encrypted, "--output", decrypted]) == 0

        assert bytes.fromhex((tmp_path / "decrypted.hex").read_text()) == message

    def test_cbc_matches_sp800_38a(self, tmp_path, hex_files):
        key = hex_files("key.hex", bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c"))
        iv = hex_files("iv.hex", range(16))
        plain = hex_files("plain.hex", bytes.fromhex("6bc1bee22e409f96e93d7e117393172a"))
        out = str(tmp_path / "out.hex")

        assert main(["encrypt", "--key", key, "--iv", iv, "--input", plain, "--output", out]) == 0

        assert (tmp_path / "out.hex").read_text().startswith("7649abac8119b246cee98e9b12e9197d")

    def test_bad_key_length(self, tmp_path, hex_files, capsys):
        key = hex_files("key.hex", range(10))
        iv = hex_files("iv.hex", range(16))
        plain = hex_files("plain.hex", b"abc")

        code = main(["encrypt", "--key", key, "--iv", iv, "--input", plain, "--output", str(tmp_path / "o.hex")])

        assert code == 1
        assert "Error" in capsys.readouterr().out

    def test_truncated_ciphertext(self, tmp_path, hex_files, capsys):
        key = hex_files("key.hex", range(16))
        iv = hex_files("iv.hex", range(16))
        data = hex_files("cipher.hex", range(20))

        code = main(["decrypt", "--key", key, "--iv", iv, "--input", data, "--output", str(tmp_path / "o.hex")])

        assert code == 1
        assert "invalid ciphertext" in capsys.readouterr().out

    def test_malformed_hex(self, tmp_path, hex_files, capsys):
        key = str(tmp_path / "key.hex")
        (tmp_path / "key.hex").write_text("abc")
        iv = hex_files("iv.hex", range(16))
        plain = hex_files("plain.hex", b"abc")

        code = main(["encrypt", "--key", key, "--iv", iv, "--input", plain, "--output", str(tmp_path / "o.hex")])

        assert code == 1
        assert "odd_length" in capsys.readouterr().out


class TestSelftest:

    def test_passes(self, capsys):
        assert main(["selftest"]) == 0
        out = capsys.readouterr().out
        assert out.count("PASS") == 3
        assert "FAIL" not in out

    def test_requires_a_command(self):
        with pytest.raises(SystemExit):
            main([])
