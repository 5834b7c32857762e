"""
Drill-down tree over comparison entities.

Every entity gets a path from a fixed per-category template, so siblings in
one category always sit at the same depth:

    PQC        PQC / algorithm / operation / variant
    KDF        KDF / algorithm / hash | default / variant / iterations | default
    Symmetric  Symmetric / algorithm / operation / variant / mode / padding

followed by one ``name=value`` segment per extra parameter name seen in the
category (``name=default`` where an entity lacks it). Segments are
URL-quoted and joined with ``/``.

The tree is built with mutable builders and then frozen; a reload builds a
fresh Hierarchy and callers re-resolve nodes by path string.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple
from urllib.parse import quote, unquote

from benchcore.records import Category, ComparisonEntity, DEFAULT_VARIANT

PATH_SEP = "/"
ROOT_PATH = ""


def quote_segment(segment: str) -> str:
    return quote(segment, safe="")


def unquote_segment(segment: str) -> str:
    return unquote(segment)


def join_path(segments: Sequence[str]) -> str:
    return PATH_SEP.join(quote_segment(s) for s in segments)


def split_path(path: str) -> List[str]:
    """Decoded segments of a path string; the root path has none."""
    path = (path or "").strip(PATH_SEP)
    if not path:
        return []
    return [unquote_segment(s) for s in path.split(PATH_SEP)]


def normalize_path(path: Optional[str]) -> str:
    """Canonical form of a path (accepts quoted or unquoted segments)."""
    return join_path(split_path(path or ""))


def _or_default(value: Optional[str]) -> str:
    return value if value else DEFAULT_VARIANT


def extra_names_by_category(comparisons: Iterable[ComparisonEntity]) -> Dict[Category, Tuple[str, ...]]:
    """Sorted union of extra parameter names seen in each category."""
    names: Dict[Category, set] = {}
    for entity in comparisons:
        names.setdefault(entity.category, set()).update(name for name, _ in entity.extras)
    return {category: tuple(sorted(found)) for category, found in names.items()}


def path_segments(
    entity: ComparisonEntity,
    extra_names: Optional[Sequence[str]] = None,
) -> Tuple[str, ...]:
    """
    Unquoted path segments of an entity, root excluded.

    With ``extra_names`` every listed parameter gets a segment, ``name=default``
    where the entity lacks it; without, only the entity's own extras follow.
    """
    if entity.category is Category.PQC:
        segments = [entity.category.value, entity.algorithm, entity.operation, entity.variant]
    elif entity.category is Category.KDF:
        segments = [
            entity.category.value,
            entity.algorithm,
            _or_default(entity.hash_algorithm),
            entity.variant,
            _or_default(entity.iteration_count),
        ]
    else:
        segments = [
            entity.category.value,
            entity.algorithm,
            entity.operation,
            entity.variant,
            _or_default(entity.cipher_mode),
            _or_default(entity.padding),
        ]
    if extra_names is None:
        segments.extend(f"{name}={value}" for name, value in entity.extras)
    else:
        values = dict(entity.extras)
        segments.extend(f"{name}={_or_default(values.get(name))}" for name in extra_names)
    return tuple(segments)


def entity_path(entity: ComparisonEntity, extra_names: Optional[Sequence[str]] = None) -> str:
    return join_path(path_segments(entity, extra_names))


@dataclass(frozen=True)
class HierarchyNode:
    """
    One node of the tree.

    ``comparisons`` holds every entity at or below this node in first-seen
    order; ``direct_comparisons`` only those whose path ends here.
    """
    name: str
    path: str
    children: Tuple["HierarchyNode", ...] = ()
    comparisons: Tuple[ComparisonEntity, ...] = ()
    direct_comparisons: Tuple[ComparisonEntity, ...] = ()

    @property
    def depth(self) -> int:
        return len(split_path(self.path))

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def is_root(self) -> bool:
        return self.path == ROOT_PATH

    def child(self, name: str) -> Optional["HierarchyNode"]:
        for node in self.children:
            if node.name == name:
                return node
        return None


class _NodeBuilder:
    __slots__ = ("name", "path", "children", "comparisons", "direct")

    def __init__(self, name: str, path: str):
        self.name = name
        self.path = path
        self.children: Dict[str, "_NodeBuilder"] = {}
        self.comparisons: List[ComparisonEntity] = []
        self.direct: List[ComparisonEntity] = []

    def freeze(self, index: Dict[str, HierarchyNode]) -> HierarchyNode:
        node = HierarchyNode(
            name=self.name,
            path=self.path,
            children=tuple(child.freeze(index) for child in self.children.values()),
            comparisons=tuple(self.comparisons),
            direct_comparisons=tuple(self.direct),
        )
        index[node.path] = node
        return node


class Hierarchy:
    """Frozen tree plus a path -> node index."""

    def __init__(
        self,
        root: HierarchyNode,
        index: Dict[str, HierarchyNode],
        extra_names: Optional[Dict[Category, Tuple[str, ...]]] = None,
    ):
        self.root = root
        self._index = index
        self.extra_names = MappingProxyType(dict(extra_names or {}))

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, path: str) -> bool:
        return self.find(path) is not None

    def find(self, path: Optional[str]) -> Optional[HierarchyNode]:
        return self._index.get(normalize_path(path))

    def resolve(self, path: Optional[str]) -> HierarchyNode:
        """Node at ``path``, or the root when the path no longer exists."""
        return self.find(path) or self.root

    def children(self, path: Optional[str] = ROOT_PATH) -> Tuple[HierarchyNode, ...]:
        node = self.find(path)
        return node.children if node else ()

    def comparisons(self, path: Optional[str] = ROOT_PATH) -> Tuple[ComparisonEntity, ...]:
        node = self.find(path)
        return node.comparisons if node else ()

    def path_of(self, entity: ComparisonEntity) -> str:
        """Path of the node an entity was inserted at."""
        return entity_path(entity, self.extra_names.get(entity.category, ()))

    def paths(self) -> List[str]:
        return [node.path for node in self.walk()]

    def walk(self) -> Iterator[HierarchyNode]:
        """Depth-first, pre-order, children in sibling order."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def build_hierarchy(comparisons: Iterable[ComparisonEntity]) -> Hierarchy:
    """
    Insert every comparison at its path, creating intermediate nodes as
    needed. Each ancestor (root included) accumulates the comparison.
    """
    comparisons = tuple(comparisons)
    extra_names = extra_names_by_category(comparisons)
    root = _NodeBuilder(name="", path=ROOT_PATH)

    for entity in comparisons:
        node = root
        root.comparisons.append(entity)
        segments: List[str] = []
        for segment in path_segments(entity, extra_names[entity.category]):
            segments.append(segment)
            child = node.children.get(segment)
            if child is None:
                child = node.children[segment] = _NodeBuilder(segment, join_path(segments))
            child.comparisons.append(entity)
            node = child
        node.direct.append(entity)

    index: Dict[str, HierarchyNode] = {}
    frozen_root = root.freeze(index)
    return Hierarchy(frozen_root, index, extra_names)
