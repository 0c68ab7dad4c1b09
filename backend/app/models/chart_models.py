"""Pydantic models for the org chart graph handed to the diagram renderer."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from app.models.crm_models import Org


class NodeKind(str, Enum):
    ORG = "org"
    ACCOUNT = "account"
    CONTACT = "contact"


class EdgeShape(str, Enum):
    HIERARCHY = "hierarchy"
    LATERAL = "lateral"


class NodePosition(BaseModel):
    x: float = 0.0
    y: float = 0.0


class ChartNode(BaseModel):
    """A node in the org chart."""

    id: str  # "org-{id}" | "acc-{id}" | "con-{account_id}:{contact_id}", parts percent-encoded
    kind: NodeKind
    label: str
    entity_id: str
    href: str | None = None
    account_number: str | None = None  # account nodes only
    role: str | None = None  # contact nodes only
    is_focus: bool = False
    is_subtle: bool = False
    position: NodePosition = Field(default_factory=NodePosition)


class ChartEdge(BaseModel):
    """An edge in the org chart."""

    id: str  # "e-{source}:{target}" | "link-{source}:{target}", parts percent-encoded
    source: str
    target: str
    shape: EdgeShape = EdgeShape.HIERARCHY


class OrgChart(BaseModel):
    nodes: list[ChartNode] = []
    edges: list[ChartEdge] = []

    @property
    def account_count(self) -> int:
        return sum(1 for n in self.nodes if n.kind == NodeKind.ACCOUNT)


class OrgChartResponse(BaseModel):
    """Complete chart response."""

    focus_account_id: str | None = None
    nodes: list[ChartNode]
    edges: list[ChartEdge]
    empty_message: str | None = None


class BuildChartRequest(BaseModel):
    orgs: list[Org] = []
    focus_account_id: str | None = None
