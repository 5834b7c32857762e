"""
API Routes for the provider comparison dashboard.

Endpoints:
- GET /api/health - Load status and counts
- GET /api/hierarchy - Full navigation tree
- GET /api/node - One node, its children and breadcrumbs
- GET /api/comparisons - Comparison rows under a node, grouped by JMH mode
- GET /api/modes - JMH modes present under a node
- GET /api/summary - Per-category comparison and win counts
- GET /api/anomalies - Anomalies and loader errors of the current load
- POST /api/reload - Rebuild the store from disk
"""

from fastapi import APIRouter, HTTPException, Query
from typing import List, Optional, Dict, Any

from benchcore.formatters import (
    breadcrumbs,
    build_display_path,
    format_mode_label,
    format_node_name,
    node_title,
)
from benchcore.hierarchy import HierarchyNode, split_path
from benchcore.records import AnomalyKind, JmhMode

from ..analysis import compute_comparison_table, group_by_mode, summarize_by_category
from ..ingest import ResultsStore, get_store, reload_store
from ..models import (
    AnomaliesResponse,
    AnomalyModel,
    Breadcrumb,
    ComparisonRow,
    ComparisonsResponse,
    HealthResponse,
    LoadErrorModel,
    ModeGroup,
    ModeInfo,
    NodeResponse,
    NodeSummary,
    ReloadResponse,
    TreeNode,
)

router = APIRouter(prefix="/api", tags=["api"])


def _store() -> ResultsStore:
    try:
        return get_store()
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


def _display_name(node: HierarchyNode) -> str:
    parts = split_path(node.path)
    if not parts:
        return "All Benchmarks"
    return format_node_name(node.name, len(parts) - 1, parts[0])


def _summary(node: HierarchyNode) -> NodeSummary:
    return NodeSummary(
        name=node.name,
        path=node.path,
        display_name=_display_name(node),
        comparison_count=len(node.comparisons),
        child_count=len(node.children),
    )


def _tree(node: HierarchyNode) -> TreeNode:
    return TreeNode(
        name=node.name,
        path=node.path,
        display_name=_display_name(node),
        comparison_count=len(node.comparisons),
        children=[_tree(child) for child in node.children],
    )


def _node_or_404(store: ResultsStore, path: str) -> HierarchyNode:
    node = store.hierarchy.find(path)
    if node is None:
        raise HTTPException(status_code=404, detail=f"No benchmark node at '{path}'")
    return node


def _parse_mode(mode: Optional[str]) -> Optional[JmhMode]:
    if mode is None or mode == "all":
        return None
    try:
        return JmhMode.parse(mode)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _modes(node: HierarchyNode) -> List[ModeInfo]:
    return [
        ModeInfo(
            mode=mode.value,
            label=format_mode_label(mode),
            higher_is_better=mode.higher_is_better,
            comparison_count=len(entities),
        )
        for mode, entities in group_by_mode(node.comparisons).items()
    ]


# =============================================================================
# STATUS
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    store = _store()
    return HealthResponse(
        status="ok" if store.has_data else "no_data",
        records_loaded=store.record_count,
        comparisons_loaded=store.comparison_count,
        excluded_records=store.result.excluded_count,
        anomaly_count=store.anomaly_count,
        load_error_count=len(store.load_errors),
        results_path=store.results_path,
        loaded_at=store.loaded_at,
    )


@router.post("/reload", response_model=ReloadResponse)
async def reload():
    """Re-read the results file and swap in the new tree."""
    try:
        current = get_store()
        store = reload_store(current.results_path)
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return ReloadResponse(
        status="ok" if store.has_data else "no_data",
        records_loaded=store.record_count,
        comparisons_loaded=store.comparison_count,
        anomaly_count=store.anomaly_count,
    )


# =============================================================================
# TREE
# =============================================================================

@router.get("/hierarchy", response_model=TreeNode)
async def get_hierarchy():
    """Full tree for the navigation sidebar."""
    return _tree(_store().hierarchy.root)


@router.get("/node", response_model=NodeResponse)
async def get_node(
    path: str = Query("", description="Slash-joined node path; empty for the root"),
    fallback: bool = Query(False, description="Return the root instead of 404 for a missing path"),
):
    """One node with its direct children, breadcrumbs and modes."""
    store = _store()
    node = store.hierarchy.find(path)
    is_fallback = False
    if node is None:
        if not fallback:
            raise HTTPException(status_code=404, detail=f"No benchmark node at '{path}'")
        node = store.hierarchy.root
        is_fallback = True

    return NodeResponse(
        node=_summary(node),
        title=node_title(node.path),
        display_path=build_display_path(split_path(node.path)),
        breadcrumbs=[Breadcrumb(**crumb) for crumb in breadcrumbs(node.path)],
        children=[_summary(child) for child in node.children],
        modes=_modes(node),
        fallback=is_fallback,
    )


@router.get("/modes", response_model=List[ModeInfo])
async def get_modes(path: str = Query("", description="Node path")):
    """JMH modes present under a node, in first-seen order."""
    return _modes(_node_or_404(_store(), path))


# =============================================================================
# COMPARISONS
# =============================================================================

@router.get("/comparisons", response_model=ComparisonsResponse)
async def get_comparisons(
    path: str = Query("", description="Node path"),
    mode: Optional[str] = Query(None, description="JMH mode filter (thrpt, avgt, ss, sample or all)"),
):
    """Comparison rows under a node, one group per JMH mode."""
    store = _store()
    node = _node_or_404(store, path)
    selected = _parse_mode(mode)

    groups = []
    count = 0
    for group_mode, entities in group_by_mode(node.comparisons).items():
        if selected is not None and group_mode is not selected:
            continue
        rows = [ComparisonRow(**row) for row in compute_comparison_table(entities, hierarchy=store.hierarchy)]
        count += len(rows)
        groups.append(ModeGroup(
            mode=group_mode.value,
            label=format_mode_label(group_mode),
            score_unit=entities[0].score_unit if entities else None,
            rows=rows,
        ))

    return ComparisonsResponse(
        path=node.path,
        provider_a=store.provider_a,
        provider_b=store.provider_b,
        count=count,
        groups=groups,
    )


@router.get("/summary")
async def get_summary(path: str = Query("", description="Node path")) -> List[Dict[str, Any]]:
    """Per-category comparison, paired and win counts under a node."""
    df = summarize_by_category(_node_or_404(_store(), path).comparisons)
    return [
        {"category": category, **{col: int(value) for col, value in row.items()}}
        for category, row in df.iterrows()
    ]


# =============================================================================
# ANOMALIES
# =============================================================================

@router.get("/anomalies", response_model=AnomaliesResponse)
async def get_anomalies(kind: Optional[str] = Query(None, description="Only anomalies of this kind")):
    """Anomalies of the current load plus files/entries the loader skipped."""
    store = _store()
    anomalies = store.result.anomalies
    if kind is not None:
        try:
            wanted = AnomalyKind(kind)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown anomaly kind '{kind}'")
        anomalies = tuple(a for a in anomalies if a.kind is wanted)

    return AnomaliesResponse(
        counts=store.result.anomaly_counts(),
        excluded_records=store.result.excluded_count,
        anomalies=[AnomalyModel(**a.to_dict()) for a in anomalies],
        load_errors=[
            LoadErrorModel(file=f, index=i, message=m) for f, i, m in store.load_errors
        ],
    )
