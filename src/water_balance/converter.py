"""
Convert water balance records into treemap data.

The output follows the ECharts ``treemap-show-parent`` layout: each node keeps
the upstream ``path`` label and receives a fill color from a
:class:`~water_balance.colors.ColorAllocator`.
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional, Sequence

from .colors import ColorAllocator
from .exceptions import TreeStructureError
from .models import DEFAULT_MAX_DEPTH, WaterBalanceItem, WaterBalanceTreeData, WaterBalanceTreeNode

logger = logging.getLogger(__name__)

DEFAULT_ROOT_LABEL = "水平衡"


class TreemapConverter:
    def __init__(
        self,
        allocator: Optional[ColorAllocator] = None,
        root_label: str = DEFAULT_ROOT_LABEL,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.allocator = allocator or ColorAllocator()
        self.root_label = root_label
        self.max_depth = max_depth

    def convert(self, items: Sequence[WaterBalanceItem]) -> WaterBalanceTreeData:
        """
        Build the treemap wrapper for ``items``.

        A single root is wrapped once more under its own name, so the chart
        shows it as a parent block. Zero or several roots sit directly under a
        synthetic ``root_label`` node. Colors are assigned depth-first,
        pre-order.
        """

        if len(items) == 1:
            root_node = self._convert_node(items[0], ancestors=[])
            result = WaterBalanceTreeData(name=root_node.name, children=(root_node,))
        else:
            result = WaterBalanceTreeData(
                name=self.root_label,
                children=tuple(self._convert_node(item, ancestors=[]) for item in items),
            )

        logger.debug("Converted %d water balance nodes into treemap '%s'", result.node_count(), result.name)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Treemap payload:\n%s", json.dumps(result.as_dict(), ensure_ascii=False, indent=2))
        return result

    def _convert_node(self, item: WaterBalanceItem, ancestors: List[WaterBalanceItem]) -> WaterBalanceTreeNode:
        if any(ancestor is item for ancestor in ancestors):
            trail = [ancestor.id for ancestor in ancestors] + [item.id]
            raise TreeStructureError(f"Cycle detected at water balance item '{item.id}'", path=trail)
        if len(ancestors) >= self.max_depth:
            trail = [ancestor.id for ancestor in ancestors] + [item.id]
            raise TreeStructureError(
                f"Water balance tree is nested deeper than {self.max_depth} levels",
                path=trail,
            )

        # Color is taken before descending so parents precede their children.
        color = self.allocator.next_color()
        children: Optional[tuple] = None
        if item.children:
            ancestors.append(item)
            try:
                children = tuple(self._convert_node(child, ancestors) for child in item.children)
            finally:
                ancestors.pop()

        return WaterBalanceTreeNode(
            name=item.name,
            value=item.water_volume,
            path=item.path,
            color=color,
            children=children,
        )


def convert_to_treemap_data(
    items: Sequence[WaterBalanceItem],
    allocator: Optional[ColorAllocator] = None,
    *,
    root_label: str = DEFAULT_ROOT_LABEL,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> WaterBalanceTreeData:
    converter = TreemapConverter(allocator=allocator, root_label=root_label, max_depth=max_depth)
    return converter.convert(items)
