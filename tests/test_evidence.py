"""Evidence digests."""

import hashlib

import pytest

from predoracle.errors import InvalidEvidence
from predoracle.evidence import build_bundle, hash_bundle, hash_evidence, normalize_evidence_hash, verify_evidence


def test_normalize_accepts_bytes_and_hex():
    raw = hashlib.sha256(b"evidence").digest()
    expected = raw.hex()
    assert normalize_evidence_hash(raw) == expected
    assert normalize_evidence_hash(expected.upper()) == expected
    assert normalize_evidence_hash("0x" + expected) == expected


@pytest.mark.parametrize("bad", [b"short", "zz" * 32, "ab" * 31, "", "ab" * 33])
def test_normalize_rejects_malformed(bad):
    with pytest.raises(InvalidEvidence):
        normalize_evidence_hash(bad)


def test_hash_evidence_is_canonical():
    a = hash_evidence("Rain recorded at CDG", ["https://meteo.example/cdg"], timestamp=1700000000000)
    b = hash_bundle({"timestamp": 1700000000000, "sources": ["https://meteo.example/cdg"], "evidenceData": "Rain recorded at CDG"})
    assert a == b
    assert len(a) == 64
    assert hash_evidence("Rain recorded at CDG", [], timestamp=1) != hash_evidence("No rain", [], timestamp=1)


def test_verify_evidence():
    bundle = build_bundle("Final score 2-1", ["https://scores.example"], timestamp=5)
    digest = hash_bundle(bundle)
    assert verify_evidence(bundle, digest)
    assert verify_evidence(b"raw bytes", hashlib.sha256(b"raw bytes").hexdigest())
    assert verify_evidence("text", hashlib.sha256(b"text").digest())
    assert not verify_evidence({**bundle, "timestamp": 6}, digest)
