"""
Pydantic response models for the comparison dashboard API.

Core pipeline types are frozen dataclasses (benchcore.records); these models
are only the wire shape handed to the rendering layer.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Any


# =============================================================================
# STATUS
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response. ``no_data`` means the load produced no comparisons."""
    status: str
    records_loaded: int
    comparisons_loaded: int
    excluded_records: int
    anomaly_count: int
    load_error_count: int
    results_path: str
    loaded_at: str


class ReloadResponse(BaseModel):
    status: str
    records_loaded: int
    comparisons_loaded: int
    anomaly_count: int


# =============================================================================
# TREE
# =============================================================================

class NodeSummary(BaseModel):
    """One tree node without its subtree."""
    name: str
    path: str
    display_name: str
    comparison_count: int
    child_count: int

    class Config:
        extra = "forbid"


class TreeNode(BaseModel):
    """Nested node for the navigation sidebar."""
    name: str
    path: str
    display_name: str
    comparison_count: int
    children: List["TreeNode"] = Field(default_factory=list)

    class Config:
        extra = "forbid"


class Breadcrumb(BaseModel):
    name: str
    path: str


class ModeInfo(BaseModel):
    """A JMH mode present under a node."""
    mode: str
    label: str
    higher_is_better: bool
    comparison_count: int


class NodeResponse(BaseModel):
    node: NodeSummary
    title: str
    display_path: str
    breadcrumbs: List[Breadcrumb]
    children: List[NodeSummary]
    modes: List[ModeInfo]
    # True when the requested path was missing and the root was returned.
    fallback: bool = False


# =============================================================================
# COMPARISONS
# =============================================================================

class ComparisonRow(BaseModel):
    """One provider comparison, flattened for tables and charts."""
    id: str
    path: str
    label: str
    category: str
    algorithm: str
    operation: str
    variant: str
    cipher_mode: Optional[str] = None
    padding: Optional[str] = None
    hash_algorithm: Optional[str] = None
    iteration_count: Optional[str] = None
    extras: Dict[str, str] = Field(default_factory=dict)
    mode: str
    mode_label: str
    score_unit: str
    provider_a: Optional[str] = None
    a_score: Optional[float] = None
    a_error: Optional[float] = None
    a_score_text: str
    a_error_text: str
    provider_b: Optional[str] = None
    b_score: Optional[float] = None
    b_error: Optional[float] = None
    b_score_text: str
    b_error_text: str
    ratio: Optional[float] = None
    ratio_text: str
    winner: Optional[str] = None

    class Config:
        extra = "forbid"


class ModeGroup(BaseModel):
    """Comparisons of one JMH mode; a table or chart is drawn per group."""
    mode: str
    label: str
    score_unit: Optional[str] = None
    rows: List[ComparisonRow]


class ComparisonsResponse(BaseModel):
    path: str
    provider_a: str
    provider_b: str
    count: int
    groups: List[ModeGroup]


# =============================================================================
# ANOMALIES
# =============================================================================

class AnomalyModel(BaseModel):
    kind: str
    message: str
    identifier: Optional[str] = None
    detail: Dict[str, Any] = Field(default_factory=dict)


class LoadErrorModel(BaseModel):
    """A file or entry the loader skipped (index is None for a whole file)."""
    file: str
    index: Optional[int] = None
    message: str


class AnomaliesResponse(BaseModel):
    counts: Dict[str, int]
    excluded_records: int
    anomalies: List[AnomalyModel]
    load_errors: List[LoadErrorModel]


TreeNode.model_rebuild()
