"""
Benchmark identifier classification.

A JMH identifier such as ``com.benchmark.pqc.MlKemBenchmark.encapsulate`` or
``Aes/Encrypt/CBC/PKCS5`` is split into tokens on ``.`` and ``/``. Rules are
tried in order and the first whose predicate accepts the tokens extracts the
fields. Tokens before the one that selects the algorithm family are package
or folder names and are ignored; every token after it must be understood
(operation, mode, padding, hash, size...) with at most one free token, which
becomes the variant.

Adding a category or algorithm family means appending a ClassificationRule
(or extending the registry in benchcore.algorithms), not editing this
control flow.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from benchcore import algorithms as alg
from benchcore.config import CONFIG
from benchcore.exceptions import ClassificationError
from benchcore.records import Category, ClassifiedRecord, DEFAULT_VARIANT, RawRecord

# Sub-field sentinel for "no cipher mode" / "no padding".
NONE = alg.PADDING_NONE

_SPLIT_RE = re.compile(r"[./]")
_CLASS_SUFFIXES = ("Benchmarks", "Benchmark", "Bench")

_PQC_VARIANT_PARAMS = ("variant", "parameterSet", "paramSet")
_KDF_VARIANT_PARAMS = ("variant",)
_SYM_VARIANT_PARAMS = ("variant", "keySize", "keyLength")
_HASH_PARAMS = ("hashAlgorithm", "hash", "digest", "prf")
_ITERATION_PARAMS = ("iterations", "iterationCount", "iteration", "cost", "costFactor", "N", "rounds", "workFactor")
_MODE_PARAMS = ("cipherMode", "blockMode")
_PADDING_PARAMS = ("padding",)
_CIPHER_PARAMS = ("transformation", "cipher", "algorithm")


def tokenize(identifier: str) -> Tuple[str, ...]:
    """Split an identifier into segments, dropping JMH class-name suffixes."""
    tokens = []
    for part in _SPLIT_RE.split(identifier):
        part = part.strip()
        for suffix in _CLASS_SUFFIXES:
            if part.endswith(suffix) and len(part) > len(suffix):
                part = part[: -len(suffix)]
                break
        if part:
            tokens.append(part)
    return tuple(tokens)


class Params:
    """
    Case- and punctuation-insensitive view over a record's parameters.

    take() marks a parameter as used; whatever is never taken ends up in
    ClassifiedRecord.extras.
    """

    def __init__(self, parameters: Mapping[str, str]):
        self._by_norm = {alg.normalize_alias(k): (k, v) for k, v in parameters.items()}
        self._consumed: set[str] = set()

    def peek(self, *names: str) -> Optional[str]:
        for name in names:
            hit = self._by_norm.get(alg.normalize_alias(name))
            if hit is not None and hit[1].strip():
                return hit[1].strip()
        return None

    def take(self, *names: str) -> Optional[str]:
        for name in names:
            norm = alg.normalize_alias(name)
            hit = self._by_norm.get(norm)
            if hit is None:
                continue
            self._consumed.add(norm)
            if hit[1].strip():
                return hit[1].strip()
        return None

    def extras(self) -> Tuple[Tuple[str, str], ...]:
        return tuple(sorted(
            (key, value)
            for norm, (key, value) in self._by_norm.items()
            if norm not in self._consumed
        ))


@dataclass(frozen=True)
class ClassificationRule:
    """matches(tokens, params) selects the rule; extract(identifier, tokens, params) fills the fields."""
    name: str
    category: Category
    matches: Callable[[Tuple[str, ...], Params], bool]
    extract: Callable[[str, Tuple[str, ...], Params], Dict[str, Any]]


def _find(tokens: Sequence[str], matcher: Callable[[str], Any]) -> Tuple[int, Any]:
    for idx, token in enumerate(tokens):
        hit = matcher(token)
        if hit is not None:
            return idx, hit
    return -1, None


def _inline_variant(name: str, suffix: str) -> Optional[str]:
    return f"{name}-{suffix}" if suffix else None


def _leftover_variant(identifier: str, leftovers: List[str]) -> Optional[str]:
    if len(leftovers) > 1:
        raise ClassificationError(identifier, f"unrecognized segments: {', '.join(leftovers)}")
    return leftovers[0] if leftovers else None


# =============================================================================
# POST-QUANTUM
# =============================================================================

def _matches_pqc(tokens: Tuple[str, ...], params: Params) -> bool:
    return _find(tokens, alg.match_pqc_family)[1] is not None


def _extract_pqc(identifier: str, tokens: Tuple[str, ...], params: Params) -> Dict[str, Any]:
    idx, family = _find(tokens, alg.match_pqc_family)
    operation = None
    inline = _inline_variant(family.name, family.suffix)
    leftovers: List[str] = []

    for token in tokens[idx + 1:]:
        op = alg.resolve_operation(token)
        if op is not None and operation is None:
            operation = op
            continue
        other = alg.match_pqc_family(token)
        if other is not None and other.key == family.key and other.suffix and inline is None:
            inline = _inline_variant(family.name, other.suffix)
            continue
        leftovers.append(token)

    if operation is None:
        operation = alg.resolve_operation(params.take("operation"))
    if operation is None:
        raise ClassificationError(identifier, f"no operation found for {family.name}")
    allowed = alg.pqc_operations(family.key)
    if operation not in allowed:
        raise ClassificationError(
            identifier, f"{family.name} does not support '{operation}' (expected one of {', '.join(allowed)})"
        )

    variant = params.take(*_PQC_VARIANT_PARAMS) or inline or _leftover_variant(identifier, leftovers)
    if leftovers and variant != leftovers[0]:
        raise ClassificationError(identifier, f"unrecognized segments: {', '.join(leftovers)}")

    return {
        "algorithm": family.name,
        "operation": operation,
        "variant": variant or DEFAULT_VARIANT,
    }


# =============================================================================
# KEY DERIVATION
# =============================================================================

def _matches_kdf(tokens: Tuple[str, ...], params: Params) -> bool:
    return _find(tokens, alg.match_kdf)[1] is not None


def _extract_kdf(identifier: str, tokens: Tuple[str, ...], params: Params) -> Dict[str, Any]:
    idx, family = _find(tokens, alg.match_kdf)
    hash_algorithm = alg.resolve_hash(family.suffix)
    inline = None if hash_algorithm or not family.suffix else _inline_variant(family.name, family.suffix)
    operation = None
    iterations = None
    leftovers: List[str] = []

    for token in tokens[idx + 1:]:
        op = alg.resolve_operation(token)
        if op is not None and operation is None:
            operation = op
            continue
        digest = alg.resolve_hash(token)
        if digest is not None and hash_algorithm is None:
            hash_algorithm = digest
            continue
        if token.isdigit() and iterations is None:
            iterations = token
            continue
        leftovers.append(token)

    param_hash = params.take(*_HASH_PARAMS)
    if param_hash:
        hash_algorithm = alg.resolve_hash(param_hash) or param_hash
    param_iterations = params.take(*_ITERATION_PARAMS)
    if param_iterations:
        iterations = param_iterations
    if operation is None:
        operation = alg.resolve_operation(params.take("operation")) or alg.DERIVE_KEY

    variant = params.take(*_KDF_VARIANT_PARAMS) or inline or _leftover_variant(identifier, leftovers)
    if leftovers and variant != leftovers[0]:
        raise ClassificationError(identifier, f"unrecognized segments: {', '.join(leftovers)}")

    return {
        "algorithm": family.name,
        "operation": operation,
        "variant": variant or DEFAULT_VARIANT,
        "hash_algorithm": hash_algorithm,
        "iteration_count": iterations,
    }


# =============================================================================
# SYMMETRIC
# =============================================================================

def _symmetric_role(token: str) -> Optional[str]:
    if alg.resolve_operation(token) in alg.SYMMETRIC_OPERATIONS:
        return "operation"
    if alg.resolve_mode(token) is not None:
        return "mode"
    if alg.resolve_padding(token) is not None:
        return "padding"
    return None


def _param_cipher(params: Params) -> Optional[alg.CipherMatch]:
    value = params.peek(*_CIPHER_PARAMS)
    if not value:
        return None
    return alg.parse_transformation(value)[0]


def _matches_symmetric(tokens: Tuple[str, ...], params: Params) -> bool:
    if _find(tokens, alg.match_cipher)[1] is not None:
        return True
    if _param_cipher(params) is not None:
        return True
    return any(alg.resolve_mode(token) is not None for token in tokens)


def _extract_symmetric(identifier: str, tokens: Tuple[str, ...], params: Params) -> Dict[str, Any]:
    idx, cipher = _find(tokens, alg.match_cipher)
    mode = padding = None

    transformation = params.take(*_CIPHER_PARAMS)
    if transformation:
        t_cipher, t_mode, t_padding = alg.parse_transformation(transformation)
        cipher = t_cipher or cipher
        mode, padding = t_mode, t_padding
    if cipher is None:
        raise ClassificationError(identifier, "symmetric benchmark without a recognized cipher")

    if idx < 0:
        # Cipher came from parameters: skip package/class segments up to the
        # first one that means something here.
        idx, _ = _find(tokens, _symmetric_role)
        idx = len(tokens) if idx < 0 else idx - 1

    operation = None
    key_size = cipher.key_size
    mode = mode or cipher.mode
    leftovers: List[str] = []

    for token in tokens[idx + 1:]:
        role = _symmetric_role(token)
        if role == "operation" and operation is None:
            operation = alg.resolve_operation(token)
        elif role == "mode" and mode is None:
            mode = alg.resolve_mode(token)
        elif role == "padding" and padding is None:
            padding = alg.resolve_padding(token)
        elif token.isdigit() and key_size is None:
            key_size = token
        else:
            leftovers.append(token)

    param_mode = params.take(*_MODE_PARAMS)
    if param_mode:
        mode = alg.resolve_mode(param_mode) or param_mode
    param_padding = params.take(*_PADDING_PARAMS)
    if param_padding:
        padding = alg.resolve_padding(param_padding) or param_padding
    if operation is None:
        operation = alg.resolve_operation(params.take("operation"))
    if operation not in alg.SYMMETRIC_OPERATIONS:
        raise ClassificationError(identifier, f"no encrypt/decrypt operation found for {cipher.name}")

    variant = params.take(*_SYM_VARIANT_PARAMS) or key_size or _leftover_variant(identifier, leftovers)
    if leftovers and variant != leftovers[0]:
        raise ClassificationError(identifier, f"unrecognized segments: {', '.join(leftovers)}")

    return {
        "algorithm": cipher.name,
        "operation": operation,
        "variant": variant or DEFAULT_VARIANT,
        "cipher_mode": mode or NONE,
        "padding": padding or NONE,
    }


# Priority order: first match wins.
DEFAULT_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule("post-quantum", Category.PQC, _matches_pqc, _extract_pqc),
    ClassificationRule("key-derivation", Category.KDF, _matches_kdf, _extract_kdf),
    ClassificationRule("symmetric", Category.SYMMETRIC, _matches_symmetric, _extract_symmetric),
)


class Classifier:
    """
    Turns RawRecords into ClassifiedRecords.

    The result depends only on the record's identifier and parameters plus
    this classifier's rules and provider settings.
    """

    def __init__(
        self,
        rules: Optional[Sequence[ClassificationRule]] = None,
        *,
        provider_param: Optional[str] = None,
        providers: Optional[Sequence[str]] = None,
    ):
        self.rules = tuple(DEFAULT_RULES if rules is None else rules)
        self.provider_param = provider_param or CONFIG["PROVIDER_PARAM"]
        self.providers = tuple(providers or (CONFIG["PROVIDER_A"], CONFIG["PROVIDER_B"]))
        self._provider_lookup = {alg.normalize_alias(p): p for p in self.providers}

    def _provider(self, identifier: str, params: Params) -> str:
        value = params.take(self.provider_param)
        if value is None:
            raise ClassificationError(identifier, f"missing provider parameter '{self.provider_param}'")
        provider = self._provider_lookup.get(alg.normalize_alias(value))
        if provider is None:
            raise ClassificationError(
                identifier, f"unknown provider {value!r} (expected one of {', '.join(self.providers)})"
            )
        return provider

    def classify(self, record: RawRecord) -> ClassifiedRecord:
        params = Params(record.parameters)
        provider = self._provider(record.identifier, params)
        tokens = tokenize(record.identifier)
        if not tokens:
            raise ClassificationError(record.identifier, "empty identifier")

        for rule in self.rules:
            if not rule.matches(tokens, params):
                continue
            fields = rule.extract(record.identifier, tokens, params)
            return ClassifiedRecord(
                raw=record,
                provider=provider,
                category=rule.category,
                extras=params.extras(),
                **fields,
            )

        raise ClassificationError(record.identifier, "no classification rule matched")


def classify(record: RawRecord) -> ClassifiedRecord:
    """Classify with the default rules and the current CONFIG providers."""
    return Classifier().classify(record)
