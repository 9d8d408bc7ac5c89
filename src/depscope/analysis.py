"""Post-analysis graph views: class-level edges and stream-event graphs."""

from __future__ import annotations

from collections.abc import Iterable

from depscope.model import ProjectReport


def class_graph(report: ProjectReport) -> dict[str, list[str]]:
    """Adjacency map between the classes present in *report*, in report order.

    Edges to types that were not analyzed as part of the project (external
    libraries, unresolved names) are dropped.
    """
    classes = {cr.class_name for cr in report.class_reports()}
    return {
        class_report.class_name: sorted(class_report.targets() & classes)
        for class_report in report.class_reports()
    }


class StreamGraph:
    """Nodes and edges accumulated from incremental stream events."""

    def __init__(self) -> None:
        self.edges: dict[str, list[str]] = {}

    @property
    def nodes(self) -> list[str]:
        return list(self.edges)

    def add_node(self, node: str) -> None:
        self.edges.setdefault(node, [])

    def add_edge(self, source: str, target: str) -> None:
        self.add_node(source)
        self.add_node(target)
        if target not in self.edges[source]:
            self.edges[source].append(target)

    def add_event(self, event: Iterable[str]) -> None:
        """Record a ``[class_fqn, import, ...]`` stream event."""
        class_name, *imports = event
        self.add_node(class_name)
        for imported in imports:
            self.add_edge(class_name, imported)

    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.edges.values())
