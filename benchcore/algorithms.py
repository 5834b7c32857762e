"""Algorithm registry and alias resolution for benchmark identifiers.

JMH benchmark names are free-form: the same algorithm shows up as
``MlKemBenchmark``, ``ML-KEM-768``, ``Kyber`` or ``mlkem768`` depending on
who wrote the benchmark class. This module keeps one registry per domain
(post-quantum families, key-derivation functions, ciphers, cipher modes,
paddings, hashes and operation names) and resolves tokens against them in a
case- and punctuation-insensitive way.

Family tokens may carry an inline suffix (``MlKem768``, ``Aes256``,
``AesGcm``, ``PBKDF2WithHmacSHA256``); the matchers return it split out so
the classifier can turn it into a variant, a key size, a mode or a hash.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, NamedTuple, Optional, Tuple


def normalize_alias(value: str) -> str:
    """Normalize alias strings for case- and punctuation-insensitive matching."""

    return "".join(ch for ch in value.lower() if ch.isalnum())


# =============================================================================
# Post-quantum families
# kind "kem": key encapsulation, kind "sig": signatures
# =============================================================================
_PQC_REGISTRY = {
    "mlkem": {
        "name": "ML-KEM",
        "kind": "kem",
        "aliases": ("ML-KEM", "MlKem", "Kyber"),
    },
    "mldsa": {
        "name": "ML-DSA",
        "kind": "sig",
        "aliases": ("ML-DSA", "MlDsa", "Dilithium"),
    },
    "slhdsa": {
        "name": "SLH-DSA",
        "kind": "sig",
        "aliases": ("SLH-DSA", "SlhDsa", "SPHINCS+", "Sphincs"),
    },
    "falcon": {
        "name": "Falcon",
        "kind": "sig",
        "aliases": ("Falcon", "FN-DSA"),
    },
    "hqc": {
        "name": "HQC",
        "kind": "kem",
        "aliases": ("HQC",),
    },
    "classicmceliece": {
        "name": "Classic-McEliece",
        "kind": "kem",
        "aliases": ("Classic-McEliece", "ClassicMcEliece", "McEliece", "CMCE"),
    },
    "frodokem": {
        "name": "FrodoKEM",
        "kind": "kem",
        "aliases": ("FrodoKEM", "Frodo"),
    },
}

_PQC_OPERATIONS = MappingProxyType({
    "kem": ("keyGen", "encapsulate", "decapsulate"),
    "sig": ("keyGen", "sign", "verify"),
})


# =============================================================================
# Key-derivation functions
# =============================================================================
_KDF_REGISTRY = {
    "pbkdf2": {"name": "PBKDF2", "aliases": ("PBKDF2", "Pbkdf2")},
    "hkdf": {"name": "HKDF", "aliases": ("HKDF", "Hkdf")},
    "scrypt": {"name": "SCrypt", "aliases": ("SCrypt", "Scrypt")},
    "argon2": {"name": "Argon2", "aliases": ("Argon2",)},
    "bcrypt": {"name": "BCrypt", "aliases": ("BCrypt", "Bcrypt")},
}


# =============================================================================
# Ciphers
# block: False for stream ciphers / AEAD constructions without a block mode
# =============================================================================
_CIPHER_REGISTRY = {
    "aes": {"name": "AES", "block": True, "aliases": ("AES", "Aes", "Rijndael")},
    "sm4": {"name": "SM4", "block": True, "aliases": ("SM4", "Sm4")},
    "tripledes": {"name": "3DES", "block": True, "aliases": ("TripleDES", "DESede", "3DES", "TDEA")},
    "des": {"name": "DES", "block": True, "aliases": ("DES", "Des")},
    "aria": {"name": "ARIA", "block": True, "aliases": ("ARIA", "Aria")},
    "camellia": {"name": "Camellia", "block": True, "aliases": ("Camellia",)},
    "blowfish": {"name": "Blowfish", "block": True, "aliases": ("Blowfish",)},
    "chacha20poly1305": {
        "name": "ChaCha20-Poly1305",
        "block": False,
        "aliases": ("ChaCha20-Poly1305", "ChaCha20Poly1305"),
    },
    "chacha20": {"name": "ChaCha20", "block": False, "aliases": ("ChaCha20", "ChaCha")},
}

_CIPHER_MODES = {
    "ECB": ("ECB",),
    "CBC": ("CBC",),
    "CFB": ("CFB",),
    "CFB8": ("CFB8",),
    "OFB": ("OFB",),
    "CTR": ("CTR", "SIC"),
    "GCM": ("GCM",),
    "GCM-SIV": ("GCM-SIV", "GCMSIV"),
    "CCM": ("CCM",),
    "XTS": ("XTS",),
    "OCB": ("OCB",),
    "EAX": ("EAX",),
}

# "none" is the sentinel for an unpadded transformation.
PADDING_NONE = "none"

_PADDINGS = {
    PADDING_NONE: ("NoPadding", "None"),
    "PKCS5": ("PKCS5", "PKCS5Padding"),
    "PKCS7": ("PKCS7", "PKCS7Padding"),
    "ISO10126": ("ISO10126", "ISO10126Padding", "ISO10126-2Padding"),
    "ISO7816-4": ("ISO7816-4", "ISO7816-4Padding"),
    "X9.23": ("X9.23", "X923Padding"),
    "TBC": ("TBC", "TBCPadding"),
    "ZeroByte": ("ZeroByte", "ZeroBytePadding"),
    "CTS": ("CTS", "CTSPadding"),
}

_HASHES = {
    "SHA1": ("SHA1", "SHA-1", "SHA"),
    "SHA224": ("SHA224", "SHA-224"),
    "SHA256": ("SHA256", "SHA-256"),
    "SHA384": ("SHA384", "SHA-384"),
    "SHA512": ("SHA512", "SHA-512"),
    "SHA3-224": ("SHA3-224",),
    "SHA3-256": ("SHA3-256",),
    "SHA3-384": ("SHA3-384",),
    "SHA3-512": ("SHA3-512",),
    "SM3": ("SM3",),
    "MD5": ("MD5",),
}

_OPERATIONS = {
    "keyGen": ("keyGen", "keyGeneration", "generateKeyPair", "keyPairGen", "generateKey"),
    "encapsulate": ("encapsulate", "encaps", "encap"),
    "decapsulate": ("decapsulate", "decaps", "decap"),
    "sign": ("sign", "signature"),
    "verify": ("verify", "verification"),
    "encrypt": ("encrypt", "enc", "encryption"),
    "decrypt": ("decrypt", "dec", "decryption"),
    "deriveKey": ("deriveKey", "derive", "keyDerivation", "derivation"),
}

DERIVE_KEY = "deriveKey"
SYMMETRIC_OPERATIONS = ("encrypt", "decrypt")


def _build_alias_map(entries: Dict[str, Iterable[str]]) -> Dict[str, str]:
    aliases: Dict[str, str] = {}
    for canonical, names in entries.items():
        for name in (canonical, *names):
            aliases.setdefault(normalize_alias(name), canonical)
    return aliases


def _build_prefix_table(registry: Dict[str, Dict]) -> Tuple[Tuple[str, str], ...]:
    """(normalized alias, registry key) pairs, longest alias first."""
    pairs = set()
    for key, entry in registry.items():
        for alias in entry["aliases"]:
            pairs.add((normalize_alias(alias), key))
    return tuple(sorted(pairs, key=lambda p: (-len(p[0]), p[0])))


_MODE_ALIASES = MappingProxyType(_build_alias_map(_CIPHER_MODES))
_PADDING_ALIASES = MappingProxyType(_build_alias_map(_PADDINGS))
_HASH_ALIASES = MappingProxyType(_build_alias_map(_HASHES))
_OPERATION_ALIASES = MappingProxyType(_build_alias_map(_OPERATIONS))

_PQC_PREFIXES = _build_prefix_table(_PQC_REGISTRY)
_KDF_PREFIXES = _build_prefix_table(_KDF_REGISTRY)
_CIPHER_PREFIXES = _build_prefix_table(_CIPHER_REGISTRY)


class FamilyMatch(NamedTuple):
    key: str
    name: str
    suffix: str


class CipherMatch(NamedTuple):
    key: str
    name: str
    block: bool
    key_size: Optional[str]
    mode: Optional[str]


def _split_suffix(token: str, alias_len: int) -> str:
    """Return the part of ``token`` after its first ``alias_len`` alphanumerics."""
    seen = 0
    for idx, ch in enumerate(token):
        if seen == alias_len:
            return token[idx:].strip("-_+ ")
        if ch.isalnum():
            seen += 1
    return ""


def _match_prefix(token: str, table: Tuple[Tuple[str, str], ...]) -> Optional[Tuple[str, str]]:
    norm = normalize_alias(token)
    if not norm:
        return None
    for alias, key in table:
        if norm.startswith(alias):
            return key, _split_suffix(token, len(alias))
    return None


def match_pqc_family(token: str) -> Optional[FamilyMatch]:
    """Match a token such as ``MlKem``, ``ML-DSA-65`` or ``Kyber768``."""
    hit = _match_prefix(token, _PQC_PREFIXES)
    if hit is None:
        return None
    key, suffix = hit
    return FamilyMatch(key, _PQC_REGISTRY[key]["name"], suffix)


def pqc_kind(family_key: str) -> str:
    return _PQC_REGISTRY[family_key]["kind"]


def pqc_operations(family_key: str) -> Tuple[str, ...]:
    """Operations a post-quantum family supports (KEM vs signature)."""
    return _PQC_OPERATIONS[pqc_kind(family_key)]


def match_kdf(token: str) -> Optional[FamilyMatch]:
    """Match a token such as ``Pbkdf2``, ``SCrypt`` or ``PBKDF2WithHmacSHA256``."""
    hit = _match_prefix(token, _KDF_PREFIXES)
    if hit is None:
        return None
    key, suffix = hit
    return FamilyMatch(key, _KDF_REGISTRY[key]["name"], suffix)


def match_cipher(token: str) -> Optional[CipherMatch]:
    """
    Match a cipher token, optionally followed by a key size and/or mode.

    ``Aes`` -> AES; ``Aes256`` -> AES, key size 256; ``AesGcm`` -> AES in
    GCM; ``Aes256Gcm`` -> both. Anything else after the cipher name means
    the token is not a cipher (``Description`` does not start a DES match).
    """
    hit = _match_prefix(token, _CIPHER_PREFIXES)
    if hit is None:
        return None
    key, suffix = hit
    entry = _CIPHER_REGISTRY[key]
    rest = normalize_alias(suffix)
    digits = ""
    while rest and rest[0].isdigit():
        digits, rest = digits + rest[0], rest[1:]
    mode = None
    if rest:
        mode = _MODE_ALIASES.get(rest)
        if mode is None:
            return None
    return CipherMatch(key, entry["name"], bool(entry["block"]), digits or None, mode)


def resolve_mode(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    return _MODE_ALIASES.get(normalize_alias(text))


def resolve_padding(text: Optional[str]) -> Optional[str]:
    """Canonical padding name; ``NoPadding`` maps to the ``none`` sentinel."""
    if not text:
        return None
    norm = normalize_alias(text)
    if norm in _PADDING_ALIASES:
        return _PADDING_ALIASES[norm]
    if norm.endswith("padding"):
        return _PADDING_ALIASES.get(norm[: -len("padding")])
    return None


def resolve_hash(text: Optional[str]) -> Optional[str]:
    """Canonical digest name from ``SHA-256``, ``HmacSHA256``, ``WithHmacSHA256`` ..."""
    if not text:
        return None
    norm = normalize_alias(text)
    for prefix in ("with", "hmac"):
        if norm.startswith(prefix):
            norm = norm[len(prefix):]
    return _HASH_ALIASES.get(norm)


def resolve_operation(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    return _OPERATION_ALIASES.get(normalize_alias(text))


def parse_transformation(text: str) -> Tuple[Optional[CipherMatch], Optional[str], Optional[str]]:
    """Split a JCA transformation (``AES/CBC/PKCS5Padding``) into cipher, mode, padding."""
    parts = [p for p in text.split("/") if p]
    cipher = match_cipher(parts[0]) if parts else None
    mode = resolve_mode(parts[1]) if len(parts) > 1 else None
    padding = resolve_padding(parts[2]) if len(parts) > 2 else None
    return cipher, mode, padding
