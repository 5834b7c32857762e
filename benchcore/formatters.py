"""
Display helpers for the rendering layer.

Pure and total: every function returns a string (or None where documented)
for any input and never raises. The pipeline itself never calls these.
"""

import math
import re
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from benchcore.hierarchy import ROOT_PATH, split_path, join_path
from benchcore.records import (
    Category,
    ComparisonEntity,
    DEFAULT_VARIANT,
    JMH_MODE_LABELS,
    JmhMode,
)
from benchcore.algorithms import PADDING_NONE

LABEL_SEP = " · "
DISPLAY_PATH_SEP = " / "
NOT_AVAILABLE = "N/A"

# Raw (benchmark-class style) names and their display form. A name that
# starts with one of these keeps its suffix: Aes256 -> AES-256.
_ALGORITHM_NAMES = {
    "MlKem": "ML-KEM",
    "MlDsa": "ML-DSA",
    "SlhDsa": "SLH-DSA",
    "Pbkdf2": "PBKDF2",
    "Aes": "AES",
    "Sm4": "SM4",
    "Des": "DES",
    "TripleDes": "3DES",
    "Rsa": "RSA",
    "Ecdsa": "ECDSA",
    "Ecdh": "ECDH",
    "Sha256": "SHA-256",
    "Sha384": "SHA-384",
    "Sha512": "SHA-512",
    "Sha3": "SHA-3",
    "Hmac": "HMAC",
}

_OPERATION_NAMES = {
    "keyGen": "Key Generation",
    "encrypt": "Encrypt",
    "decrypt": "Decrypt",
    "sign": "Sign",
    "verify": "Verify",
    "deriveKey": "Key Derivation",
    "encapsulate": "Encapsulate",
    "decapsulate": "Decapsulate",
}

_SUPERSCRIPT = str.maketrans("0123456789-+", "⁰¹²³⁴⁵⁶⁷⁸⁹⁻⁺")


def format_algorithm_name(name: str) -> str:
    if name in _ALGORITHM_NAMES:
        return _ALGORITHM_NAMES[name]
    for raw, display in _ALGORITHM_NAMES.items():
        if name.startswith(raw):
            suffix = name[len(raw):]
            if suffix[:1].isdigit():
                return f"{display}-{suffix}"
            return display + suffix
    return name


def format_operation_name(name: str) -> str:
    if name in _OPERATION_NAMES:
        return _OPERATION_NAMES[name]
    return name[:1].upper() + name[1:]


def format_variant_name(name: str) -> str:
    if name == DEFAULT_VARIANT:
        return "Default"
    return format_algorithm_name(name)


def format_mode_label(mode) -> str:
    try:
        return JMH_MODE_LABELS[JmhMode.parse(mode)]
    except ValueError:
        return str(mode)


def format_node_name(name: str, depth: int, category: Optional[str] = None) -> str:
    """
    Display name of a tree segment at ``depth`` (0 = category level).

    Level 2 is the operation except under KDF, where it is the hash
    algorithm and is shown as-is.
    """
    if depth <= 0:
        return name
    if depth == 1:
        return format_algorithm_name(name)
    if depth == 2:
        if category == Category.KDF.value:
            return name
        return format_operation_name(name)
    if "=" in name:
        return name
    return format_variant_name(name)


def build_display_path(parts: Sequence[str]) -> str:
    category = parts[0] if parts else None
    return DISPLAY_PATH_SEP.join(format_node_name(p, i, category) for i, p in enumerate(parts))


def breadcrumbs(path: Optional[str]) -> List[Dict[str, str]]:
    """[{name, path}] from the root down to ``path``."""
    parts = split_path(path or ROOT_PATH)
    if not parts:
        return [{"name": "All Benchmarks", "path": ROOT_PATH}]
    crumbs = [{"name": "All", "path": ROOT_PATH}]
    category = parts[0]
    for idx, part in enumerate(parts):
        crumbs.append({
            "name": format_node_name(part, idx, category),
            "path": join_path(parts[: idx + 1]),
        })
    return crumbs


def node_title(path: Optional[str]) -> str:
    parts = split_path(path or ROOT_PATH)
    if not parts:
        return "All Benchmarks"
    return format_node_name(parts[-1], len(parts) - 1, parts[0])


# =============================================================================
# Numbers
# =============================================================================

def _usable(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def format_power_of_ten(value: float, decimals: int = 4) -> str:
    """``0.00000027560`` -> ``2.7560 × 10⁻⁷``."""
    if not _usable(value):
        return NOT_AVAILABLE
    if value == 0:
        return f"{0:.{decimals}f} × 10⁰"
    exp = math.floor(math.log10(abs(value)))
    mantissa = value / 10 ** exp
    if abs(round(mantissa, decimals)) >= 10:
        mantissa /= 10
        exp += 1
    return f"{mantissa:.{decimals}f} × 10{str(exp).translate(_SUPERSCRIPT)}"


def _needs_power_of_ten(value: float) -> bool:
    return value >= 1000 or 0 < value < 0.01


def format_score_value(value: Optional[float], decimals: int = 4) -> str:
    if not _usable(value):
        return NOT_AVAILABLE
    if _needs_power_of_ten(value):
        return format_power_of_ten(value)
    return f"{value:.{decimals}f}"


def format_score_with_unit(value: Optional[float], unit: str) -> str:
    if not _usable(value):
        return NOT_AVAILABLE
    return f"{format_score_value(value)} {unit}"


def format_error_margin(value: Optional[float]) -> str:
    if not _usable(value):
        return NOT_AVAILABLE
    return "+/- " + format_score_value(value)


def format_ratio(value: Optional[float], decimals: int = 2) -> str:
    if not _usable(value):
        return NOT_AVAILABLE
    return f"{value:.{decimals}f}x"


# =============================================================================
# Comparisons
# =============================================================================

def winner(entity: ComparisonEntity) -> Optional[str]:
    """
    Provider with the better score, or None when a side is missing.

    Throughput: higher wins. Time modes: lower wins. Ties go to provider A.
    """
    if entity.a is None or entity.b is None:
        return None
    if entity.mode.higher_is_better:
        b_wins = entity.b.score > entity.a.score
    else:
        b_wins = entity.b.score < entity.a.score
    return entity.b.provider if b_wins else entity.a.provider


def comparison_label(
    entity: ComparisonEntity,
    *,
    show_algorithm: bool = False,
    show_operation: bool = False,
) -> str:
    """
    Row label for a comparison. Algorithm/operation are only shown when the
    surrounding table mixes several of them; ``default`` and ``none`` values
    are left out.
    """
    parts: List[str] = []
    if show_algorithm:
        parts.append(format_algorithm_name(entity.algorithm))
    if show_operation:
        parts.append(format_operation_name(entity.operation))

    if entity.category is Category.SYMMETRIC:
        if entity.variant != DEFAULT_VARIANT:
            parts.append(entity.variant)
        for value in (entity.cipher_mode, entity.padding):
            if value and value != PADDING_NONE:
                parts.append(value)
    elif entity.category is Category.KDF:
        if entity.hash_algorithm:
            parts.append(entity.hash_algorithm)
        if entity.iteration_count:
            parts.append(entity.iteration_count)
        if entity.variant != DEFAULT_VARIANT:
            parts.append(format_variant_name(entity.variant))
    elif entity.variant != DEFAULT_VARIANT:
        parts.append(format_variant_name(entity.variant))

    parts.extend(f"{name}={value}" for name, value in entity.extras)
    if not parts:
        parts.append(format_variant_name(entity.variant))
    return LABEL_SEP.join(parts)


def comparison_labels(entities: Sequence[ComparisonEntity]) -> List[str]:
    """Labels for one table of comparisons, in order."""
    show_algorithm = len({e.algorithm for e in entities}) > 1
    show_operation = len({e.operation for e in entities}) > 1
    return [
        comparison_label(e, show_algorithm=show_algorithm, show_operation=show_operation)
        for e in entities
    ]


def comparison_rows(entities: Sequence[ComparisonEntity]) -> List[Dict[str, object]]:
    """Flat records (raw numbers plus display strings) for tables and CSV."""
    rows = []
    for entity, label in zip(entities, comparison_labels(entities)):
        ratio = entity.ratio()
        rows.append({
            "id": entity.id,
            "label": label,
            "category": entity.category.value,
            "algorithm": entity.algorithm,
            "operation": entity.operation,
            "variant": entity.variant,
            "cipher_mode": entity.cipher_mode,
            "padding": entity.padding,
            "hash_algorithm": entity.hash_algorithm,
            "iteration_count": entity.iteration_count,
            "mode": entity.mode.value,
            "mode_label": format_mode_label(entity.mode),
            "score_unit": entity.score_unit,
            "provider_a": entity.a.provider if entity.a else None,
            "a_score": entity.a_score,
            "a_error": entity.a_error,
            "a_score_text": format_score_value(entity.a_score),
            "a_error_text": format_error_margin(entity.a_error),
            "provider_b": entity.b.provider if entity.b else None,
            "b_score": entity.b_score,
            "b_error": entity.b_error,
            "b_score_text": format_score_value(entity.b_score),
            "b_error_text": format_error_margin(entity.b_error),
            "ratio": ratio,
            "ratio_text": format_ratio(ratio),
            "winner": winner(entity),
        })
    return rows


def unique_modes(entities: Iterable[ComparisonEntity]) -> List[JmhMode]:
    """Modes present, in first-seen order."""
    seen: Dict[JmhMode, None] = {}
    for entity in entities:
        seen.setdefault(entity.mode, None)
    return list(seen)


def export_filename(path: Optional[str], suffix: Optional[str] = None, day: Optional[date] = None) -> str:
    """``jmh-<path>-<suffix>-<YYYY-MM-DD>`` with the path flattened to [a-z0-9_-]."""
    base = re.sub(r"[^a-zA-Z0-9-]", "_", (path or "").replace("/", "-")).lower()
    stamp = (day or date.today()).isoformat()
    if suffix:
        return f"jmh-{base}-{suffix}-{stamp}"
    return f"jmh-{base}-{stamp}"
