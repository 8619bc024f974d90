from typing import List, Sequence

from depviz.core.model import DependencyNode


def edge_lines(nodes: Sequence[DependencyNode], parent: str) -> List[str]:
    """Pre-order edge lines: each node's edge, then its whole subtree, then the next sibling."""
    lines = []
    for node in nodes:
        lines.append(f'  "{parent}" -> "{node.name}";')
        lines.extend(edge_lines(node.dependencies, node.name))
    return lines


def serialize(root_dependencies: Sequence[DependencyNode], root_name: str) -> str:
    """
    Builds the DOT digraph for a resolved tree.

    Names are written verbatim: a package name containing a double quote
    produces an invalid graph.
    """
    lines = [f"digraph {root_name} {{"]
    lines.extend(edge_lines(root_dependencies, root_name))
    lines.append("}")
    return "\n".join(lines) + "\n"
