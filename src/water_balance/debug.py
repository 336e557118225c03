from __future__ import annotations

import logging
from typing import List, Optional

from .models import WaterBalanceTreeData, WaterBalanceTreeNode

logger = logging.getLogger("water_balance")


def _format_node(node: WaterBalanceTreeNode, level: int, lines: List[str]) -> None:
    indent = "  " * level
    lines.append(f"{indent}- {node.name} (值: {node.value}, 路径: {node.path})")
    if node.children:
        lines.append(f"{indent}  包含 {len(node.children)} 个子节点:")
        for child in node.children:
            _format_node(child, level + 1, lines)


def format_treemap_data(data: WaterBalanceTreeData) -> List[str]:
    """
    Render ``data`` as an indented, depth-first listing.

    The last content line carries the total node count across all top-level
    children; the synthetic wrapper itself is not counted.
    """

    lines = [
        "=== Treemap 数据结构调试 ===",
        f"根容器名称: {data.name}",
        f"子节点数量: {len(data.children)}",
    ]
    for index, child in enumerate(data.children, start=1):
        lines.append(f"第{index}个顶级节点:")
        _format_node(child, 0, lines)
    lines.append(f"总节点数: {data.node_count()}")
    lines.append("=== 调试结束 ===")
    return lines


def debug_treemap_data(data: WaterBalanceTreeData, log: Optional[logging.Logger] = None) -> int:
    target = log or logger
    for line in format_treemap_data(data):
        target.info("%s", line)
    return data.node_count()
