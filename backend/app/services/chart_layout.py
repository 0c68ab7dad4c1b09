"""Grid layout for the org chart.

Each org is a block: the org node on top, its accounts in one row below it,
and each account's contacts stacked in a column under the account. Blocks for
several orgs are placed side by side. Lateral edges never move nodes.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from pydantic import BaseModel, Field, ValidationError

from app.models.chart_models import ChartNode, NodePosition

logger = logging.getLogger(__name__)


class ChartLayoutConfig(BaseModel):
    """Spacing constants for the grid, in renderer pixels."""

    node_width: float = Field(default=220, ge=0)
    account_node_height: float = Field(default=52, ge=0)
    contact_node_height: float = Field(default=48, ge=0)
    level_gap: float = Field(default=120, ge=0)
    row_gap: float = Field(default=24, ge=0)
    column_gap: float = Field(default=32, ge=0)
    org_gap: float = Field(default=96, ge=0)

    @property
    def column_width(self) -> float:
        return self.node_width + self.column_gap


_ENV_FIELDS = {
    "CRM_CHART_NODE_WIDTH": "node_width",
    "CRM_CHART_ACCOUNT_NODE_HEIGHT": "account_node_height",
    "CRM_CHART_CONTACT_NODE_HEIGHT": "contact_node_height",
    "CRM_CHART_LEVEL_GAP": "level_gap",
    "CRM_CHART_ROW_GAP": "row_gap",
    "CRM_CHART_COLUMN_GAP": "column_gap",
    "CRM_CHART_ORG_GAP": "org_gap",
}


def layout_config_from_env() -> ChartLayoutConfig:
    """Build ChartLayoutConfig from environment variables.

    Unparseable or negative values are logged and the default is kept.
    """
    values: dict[str, float] = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = os.environ.get(env_name)
        if raw is None or not raw.strip():
            continue
        try:
            ChartLayoutConfig(**{field_name: raw})
        except ValidationError:
            logger.warning("Ignoring invalid %s=%r", env_name, raw)
            continue
        values[field_name] = float(raw)
    return ChartLayoutConfig(**values)


@dataclass
class AccountColumn:
    account: ChartNode
    contacts: list[ChartNode] = field(default_factory=list)


@dataclass
class OrgBlock:
    org: ChartNode
    columns: list[AccountColumn] = field(default_factory=list)

    def width(self, config: ChartLayoutConfig) -> float:
        """Width of the account row (or of the lone org node)."""
        n = len(self.columns)
        if n == 0:
            return config.node_width
        return n * config.node_width + (n - 1) * config.column_gap


def position_block(block: OrgBlock, config: ChartLayoutConfig, x_offset: float = 0.0) -> None:
    """Assign positions to every node of one org block."""
    col_width = config.column_width
    account_row_y = config.level_gap
    n = len(block.columns)

    center_x = ((n - 1) * col_width) / 2 if n > 0 else 0.0
    block.org.position = NodePosition(x=x_offset + center_x, y=0.0)

    for i, column in enumerate(block.columns):
        acc_x = x_offset + i * col_width
        column.account.position = NodePosition(x=acc_x, y=account_row_y)

        contact_y = account_row_y + config.account_node_height + config.row_gap
        for contact in column.contacts:
            contact.position = NodePosition(x=acc_x, y=contact_y)
            contact_y += config.contact_node_height + config.row_gap


def apply_layout(blocks: list[OrgBlock], config: ChartLayoutConfig | None = None) -> None:
    """Lay out org blocks left to right so they never overlap."""
    if config is None:
        config = ChartLayoutConfig()
    x_offset = 0.0
    for block in blocks:
        position_block(block, config, x_offset)
        x_offset += block.width(config) + config.org_gap
