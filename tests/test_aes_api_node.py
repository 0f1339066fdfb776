"""Tests for the AES key-handle API, through Flask's test client."""

import hashlib
import threading
from unittest.mock import patch

import pytest

import aes_api_node
from aes_modes import AES, PKCS7Padding, cbc_encrypt


@pytest.fixture
def client():
    aes_api_node.keys.clear()
    aes_api_node.config.clear()
    aes_api_node.app.config["TESTING"] = True
    with aes_api_node.app.test_client() as test_client:
        yield test_client
    aes_api_node.keys.clear()


def open_handle(client, **payload):
    response = client.post("/aes_open", json=payload)
    assert response.status_code == 200
    return response.get_json()["key_handle"]


class TestOpenClose:

    def test_open_generates_handle(self, client):
        response = client.post("/aes_open", json={})
        body = response.get_json()

        assert response.status_code == 200
        assert body["status"] == 0
        assert body["key_handle"] in aes_api_node.keys
        assert aes_api_node.keys[body["key_handle"]]["key_length_bits"] == 256

    def test_open_with_explicit_handle_and_length(self, client):
        handle = open_handle(client, key_handle="alice-1", key_length_bits=128)
        assert handle == "alice-1"
        assert aes_api_node.keys["alice-1"]["cipher"].rounds == 10

    def test_open_without_json_body(self, client):
        response = client.post("/aes_open")
        assert response.status_code == 200
        assert response.get_json()["status"] == 0

    def test_duplicate_handle(self, client):
        open_handle(client, key_handle="dup")
        response = client.post("/aes_open", json={"key_handle": "dup"})
        assert response.status_code == 400
        assert response.get_json()["status"] == aes_api_node.STATUS_HANDLE_IN_USE

    def test_invalid_key_length(self, client):
        response = client.post("/aes_open", json={"key_length_bits": 100})
        assert response.status_code == 400
        assert response.get_json()["status"] == aes_api_node.STATUS_INVALID_LENGTH
        assert aes_api_node.keys == {}

    def test_configured_default_key_length(self, client):
        aes_api_node.config["key_length_bits"] = 192
        handle = open_handle(client)
        assert aes_api_node.keys[handle]["cipher"].rounds == 12

    def test_close(self, client):
        handle = open_handle(client)
        response = client.post("/aes_close", json={"key_handle": handle})
        assert response.get_json()["status"] == 0
        assert handle not in aes_api_node.keys

    def test_close_unknown_handle(self, client):
        response = client.post("/aes_close", json={"key_handle": "nope"})
        assert response.status_code == 400
        assert response.get_json()["status"] == aes_api_node.STATUS_INVALID_HANDLE


class TestEncryptDecrypt:

    @pytest.mark.parametrize("mode", ["cbc", "ctr"])
    def test_round_trip(self, client, mode):
        handle = open_handle(client, key_length_bits=128)
        message = b"attack at dawn, bring snacks"

        encrypted = client.post("/aes_encrypt", json={"key_handle": handle, "mode": mode, "data": message.hex()}).get_json()
        assert encrypted["status"] == 0
        assert len(bytes.fromhex(encrypted["iv"])) == 16

        decrypted = client.post(
            "/aes_decrypt",
            json={"key_handle": handle, "mode": mode, "data": encrypted["data"], "iv": encrypted["iv"]},
        ).get_json()
        assert decrypted["status"] == 0
        assert bytes.fromhex(decrypted["data"]) == message

    def test_passphrase_key_is_sha256_derived(self, client):
        handle = open_handle(client, key_length_bits=128, passphrase="correct horse")
        iv = bytes(range(16))

        body = client.post(
            "/aes_encrypt",
            json={"key_handle": handle, "mode": "cbc", "data": b"hello".hex(), "iv": iv.hex()},
        ).get_json()

        key = hashlib.sha256(b"correct horse").digest()[:16]
        expected = cbc_encrypt(AES(key), iv, PKCS7Padding(b"hello"))
        assert body["iv"] == iv.hex()
        assert bytes.fromhex(body["data"]) == expected
        assert aes_api_node.keys[handle]["derived"] is True

    def test_default_mode_is_cbc(self, client):
        handle = open_handle(client)
        body = client.post("/aes_encrypt", json={"key_handle": handle, "data": "00"}).get_json()
        assert len(bytes.fromhex(body["data"])) == 16

    def test_missing_handle(self, client):
        response = client.post("/aes_encrypt", json={"data": "00"})
        assert response.status_code == 400
        assert response.get_json()["status"] == aes_api_node.STATUS_MISSING_FIELD

    def test_unknown_handle(self, client):
        response = client.post("/aes_encrypt", json={"key_handle": "ghost", "data": "00"})
        assert response.get_json()["status"] == aes_api_node.STATUS_INVALID_HANDLE

    def test_unknown_mode(self, client):
        handle = open_handle(client)
        response = client.post("/aes_encrypt", json={"key_handle": handle, "mode": "ecb", "data": "00"})
        assert response.get_json()["status"] == aes_api_node.STATUS_UNKNOWN_MODE

    def test_invalid_hex(self, client):
        handle = open_handle(client)
        response = client.post("/aes_encrypt", json={"key_handle": handle, "data": "xyz0"})
        assert response.status_code == 400
        assert response.get_json()["status"] == aes_api_node.STATUS_INVALID_HEX

    def test_short_iv(self, client):
        handle = open_handle(client)
        response = client.post("/aes_encrypt", json={"key_handle": handle, "data": "00", "iv": "0011"})
        assert response.get_json()["status"] == aes_api_node.STATUS_INVALID_LENGTH

    def test_decrypt_requires_iv(self, client):
        handle = open_handle(client)
        response = client.post("/aes_decrypt", json={"key_handle": handle, "data": "00" * 16})
        assert response.get_json()["status"] == aes_api_node.STATUS_MISSING_FIELD

    def test_truncated_cbc_ciphertext(self, client):
        handle = open_handle(client)
        response = client.post(
            "/aes_decrypt",
            json={"key_handle": handle, "mode": "cbc", "data": "00" * 15, "iv": "00" * 16},
        )
        assert response.status_code == 400
        assert response.get_json()["status"] == aes_api_node.STATUS_BAD_CIPHERTEXT

    def test_closed_handle_cannot_encrypt(self, client):
        handle = open_handle(client)
        client.post("/aes_close", json={"key_handle": handle})
        response = client.post("/aes_encrypt", json={"key_handle": handle, "data": "00"})
        assert response.get_json()["status"] == aes_api_node.STATUS_INVALID_HANDLE


class TestMalformedRequests:

    @pytest.fixture(autouse=True)
    def real_error_handling(self, client):
        # with TESTING off an unhandled exception becomes an HTML 500
        aes_api_node.app.config["TESTING"] = False
        yield
        aes_api_node.app.config["TESTING"] = True

    @pytest.mark.parametrize("endpoint", ["/aes_open", "/aes_encrypt", "/aes_decrypt", "/aes_close"])
    def test_non_object_body(self, client, endpoint):
        response = client.post(endpoint, json=[1])
        assert response.status_code == 400
        assert response.get_json()["status"] == aes_api_node.STATUS_MISSING_FIELD

    @pytest.mark.parametrize("payload, status", [
        ({"key_length_bits": 128.0}, aes_api_node.STATUS_INVALID_LENGTH),
        ({"key_length_bits": "128"}, aes_api_node.STATUS_INVALID_LENGTH),
        ({"key_length_bits": True}, aes_api_node.STATUS_INVALID_LENGTH),
        ({"passphrase": 123}, aes_api_node.STATUS_MISSING_FIELD),
        ({"key_handle": ["x"]}, aes_api_node.STATUS_MISSING_FIELD),
    ])
    def test_open_rejects_wrong_field_types(self, client, payload, status):
        response = client.post("/aes_open", json=payload)
        assert response.status_code == 400
        assert response.get_json()["status"] == status
        assert aes_api_node.keys == {}

    @pytest.mark.parametrize("endpoint", ["/aes_encrypt", "/aes_decrypt"])
    @pytest.mark.parametrize("fields, status", [
        ({"data": 5, "iv": "00" * 16}, aes_api_node.STATUS_INVALID_HEX),
        ({"data": "00" * 16, "iv": ["00"]}, aes_api_node.STATUS_INVALID_HEX),
        ({"key_handle": ["x"], "data": "00", "iv": "00" * 16}, aes_api_node.STATUS_MISSING_FIELD),
        ({"mode": ["cbc"], "data": "00", "iv": "00" * 16}, aes_api_node.STATUS_UNKNOWN_MODE),
    ])
    def test_transform_rejects_wrong_field_types(self, client, endpoint, fields, status):
        handle = open_handle(client)
        response = client.post(endpoint, json={"key_handle": handle, **fields})
        assert response.status_code == 400
        assert response.get_json()["status"] == status

    def test_close_rejects_unhashable_handle(self, client):
        response = client.post("/aes_close", json={"key_handle": ["x"]})
        assert response.status_code == 400
        assert response.get_json()["status"] == aes_api_node.STATUS_MISSING_FIELD


class TestConcurrentOpen:

    def test_same_handle_opened_once(self, client):
        # openers are released together once all of them are running
        barrier = threading.Barrier(8)
        results = []

        def open_same():
            barrier.wait()
            with aes_api_node.app.test_client() as own_client:
                response = own_client.post("/aes_open", json={"key_handle": "shared"})
                results.append(response.get_json()["status"])

        with aes_api_node.keys_lock:
            threads = [threading.Thread(target=open_same) for _ in range(8)]
            for t in threads:
                t.start()
        for t in threads:
            t.join()

        assert results.count(aes_api_node.STATUS_OK) == 1
        assert results.count(aes_api_node.STATUS_HANDLE_IN_USE) == 7

    def test_open_holds_lock_around_insert(self, client):
        with patch.object(aes_api_node, "keys_lock") as lock:
            open_handle(client, key_handle="guarded")
        lock.__enter__.assert_called_once()
        assert "guarded" in aes_api_node.keys
