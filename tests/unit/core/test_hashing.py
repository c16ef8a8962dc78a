"""Unit tests for hashing utilities."""

import pytest

from futureresume.core.hashing import (
    SUPPORTED_ALGORITHMS,
    calculate_bytes_hash,
    calculate_payload_hash,
)


class TestCalculateBytesHash:
    def test_sha256_known_value(self):
        assert (
            calculate_bytes_hash(b"hello")
            == "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
        )

    def test_md5_known_value(self):
        assert calculate_bytes_hash(b"hello", algorithm="md5") == "5d41402abc4b2a76b9719d911017c592"

    def test_unsupported_algorithm_raises(self):
        with pytest.raises(ValueError, match="Unsupported hash algorithm"):
            calculate_bytes_hash(b"hello", algorithm="crc32")

    def test_supported_algorithms(self):
        assert "sha256" in SUPPORTED_ALGORITHMS


class TestCalculatePayloadHash:
    def test_key_order_does_not_matter(self):
        first = calculate_payload_hash({"mode": "concise", "voice": "first-person"})
        second = calculate_payload_hash({"voice": "first-person", "mode": "concise"})
        assert first == second

    def test_different_payloads_differ(self):
        assert calculate_payload_hash({"mode": "concise"}) != calculate_payload_hash(
            {"mode": "detailed"}
        )

    def test_non_serialisable_payload_raises(self):
        with pytest.raises(TypeError):
            calculate_payload_hash({"value": object()})
