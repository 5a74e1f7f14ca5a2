"""Evidence bundles and their 32-byte digests."""

from __future__ import annotations

import hashlib
import json
import time
from typing import Any

from predoracle.errors import InvalidEvidence

DIGEST_SIZE = 32


def normalize_evidence_hash(value: bytes | bytearray | str) -> str:
    """Canonicalize a SHA-256 digest to 64 lowercase hex chars. Accepts raw bytes or hex (optional 0x)."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != DIGEST_SIZE:
            raise InvalidEvidence(f"Evidence hash must be {DIGEST_SIZE} bytes, got {len(value)}")
        return bytes(value).hex()
    s = (value or "").strip()
    if s.startswith(("0x", "0X")):
        s = s[2:]
    try:
        raw = bytes.fromhex(s)
    except ValueError:
        raise InvalidEvidence(f"Evidence hash is not valid hex: {value!r}") from None
    if len(raw) != DIGEST_SIZE:
        raise InvalidEvidence(f"Evidence hash must be {DIGEST_SIZE} bytes, got {len(raw)}")
    return raw.hex()


def build_bundle(evidence: str, sources: list[str] | None = None, timestamp: int | None = None) -> dict[str, Any]:
    """Evidence bundle as uploaded to archival storage (ms timestamp)."""
    return {
        "evidenceData": evidence,
        "sources": list(sources or []),
        "timestamp": timestamp if timestamp is not None else int(time.time() * 1000),
    }


def bundle_bytes(bundle: dict[str, Any]) -> bytes:
    return json.dumps(bundle, sort_keys=True, separators=(",", ":")).encode("utf-8")


def hash_bundle(bundle: dict[str, Any]) -> str:
    return hashlib.sha256(bundle_bytes(bundle)).hexdigest()


def hash_evidence(evidence: str, sources: list[str] | None = None, timestamp: int | None = None) -> str:
    """Digest of a freshly built evidence bundle."""
    return hash_bundle(build_bundle(evidence, sources, timestamp))


def verify_evidence(data: bytes | str | dict[str, Any], expected_hash: bytes | str) -> bool:
    """Check fetched evidence (raw bytes, text, or a bundle dict) against a stored digest."""
    expected = normalize_evidence_hash(expected_hash)
    if isinstance(data, dict):
        raw = bundle_bytes(data)
    elif isinstance(data, str):
        raw = data.encode("utf-8")
    else:
        raw = data
    return hashlib.sha256(raw).hexdigest() == expected
