"""Walk a javalang AST and emit the typed dependencies of one compilation unit."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator

import javalang

from depscope.model import EXCLUDED_PACKAGES, ClassReport, Dependency, DependencyKind
from depscope.parser import ParsedUnit

logger = logging.getLogger(__name__)

_LITERAL_OR_COMMENT = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|/\*.*?\*/|//.*$')


def is_class_type(type_node) -> bool:
    """True for a class or interface type: a reference type that is not an array."""
    return isinstance(type_node, javalang.tree.ReferenceType) and not type_node.dimensions


def type_name(ref) -> str:
    """Erased, dotted name of a reference type as written (``Map.Entry``)."""
    parts = []
    node = ref
    while node is not None:
        parts.append(node.name)
        node = getattr(node, "sub_type", None)
    return ".".join(parts)


def render_type(type_node) -> str:
    """Source-like rendering of a type, including type arguments and arrays."""
    if isinstance(type_node, javalang.tree.ReferenceType):
        segments = []
        node = type_node
        while node is not None:
            segment = node.name
            if node.arguments:
                segment += "<" + ", ".join(_render_type_argument(a) for a in node.arguments) + ">"
            segments.append(segment)
            node = node.sub_type
        text = ".".join(segments)
    else:
        text = type_node.name
    return text + "[]" * len(type_node.dimensions or [])


def _render_type_argument(argument) -> str:
    if argument.type is None:
        return "?"
    if argument.pattern_type in ("extends", "super"):
        return f"? {argument.pattern_type} {render_type(argument.type)}"
    return render_type(argument.type)


def walk(node, line: int = 0) -> Iterator[tuple[object, int]]:
    """Yield ``(node, line)`` depth-first.

    *line* is the node's own source line when javalang recorded one, else the
    line of the closest positioned ancestor, else 0.
    """
    if isinstance(node, (list, tuple)):
        for item in node:
            yield from walk(item, line)
        return
    if not isinstance(node, javalang.ast.Node):
        return
    if node.position is not None:
        line = node.position.line
    yield node, line
    for child in node.children:
        yield from walk(child, line)


class DependencyExtractor:
    """Build the :class:`ClassReport` for a parsed compilation unit."""

    def __init__(self, unit: ParsedUnit) -> None:
        self.unit = unit
        self.class_name = unit.class_name
        self.report = ClassReport(self.class_name)
        self._lines = unit.source.splitlines()
        self._handlers = {
            javalang.tree.Import: self._visit_import,
            javalang.tree.ClassDeclaration: self._visit_class,
            javalang.tree.InterfaceDeclaration: self._visit_interface,
            javalang.tree.FieldDeclaration: self._visit_field,
            javalang.tree.MethodDeclaration: self._visit_method,
            javalang.tree.ClassCreator: self._visit_creator,
        }

    def extract(self) -> ClassReport:
        for node, line in walk(self.unit.tree):
            handler = self._handlers.get(type(node))
            if handler is not None:
                handler(node, line)
        logger.debug(
            "%s: %d dependencies", self.class_name, len(self.report.dependencies)
        )
        return self.report.freeze()

    def is_reportable(self, target: str | None) -> bool:
        if not target or target == "void":
            return False
        if any(target.startswith(prefix) for prefix in EXCLUDED_PACKAGES):
            return False
        return target != self.class_name

    # -- visitors --------------------------------------------------------

    def _visit_import(self, node, line: int) -> None:
        if node.static or node.wildcard:
            return
        if node.position is None:
            line = self._locate(rf"\bimport\s+{re.escape(node.path)}\s*;", line)
        self._add(node.path, DependencyKind.IMPORT, f"import {node.path};", line)

    def _visit_class(self, node, line: int) -> None:
        if node.extends is not None:
            self._add_type(node.extends, DependencyKind.EXTENDS, "extends", line)
        for implemented in node.implements or []:
            self._add_type(implemented, DependencyKind.IMPLEMENTS, "implements", line)

    def _visit_interface(self, node, line: int) -> None:
        for extended in node.extends or []:
            self._add_type(extended, DependencyKind.EXTENDS, "extends", line)

    def _visit_field(self, node, line: int) -> None:
        # Only class and interface fields; primitive and array fields are skipped.
        if not is_class_type(node.type):
            return
        for _declarator in node.declarators:
            self._add_type(node.type, DependencyKind.FIELD, "field", line)

    def _visit_method(self, node, line: int) -> None:
        # void methods carry no return_type
        if node.return_type is not None:
            self._add_type(node.return_type, DependencyKind.METHOD_RETURN, "return type", line)
        for parameter in node.parameters:
            anchored = parameter.position is not None
            param_line = parameter.position.line if anchored else line
            self._add_type(
                parameter.type, DependencyKind.METHOD_PARAMETER, "parameter", param_line, anchored=anchored
            )

    def _visit_creator(self, node, line: int) -> None:
        self._add_type(
            node.type, DependencyKind.INSTANTIATION, "new", line, anchored=node.position is not None
        )

    # -- emission --------------------------------------------------------

    def _locate(self, pattern: str, line: int) -> int:
        """First source line at or after *line* whose code matches *pattern*.

        javalang records positions for declarations only, so the line of a
        type reference is found by scanning forward from its enclosing node.
        String and character literals and comments are blanked before matching.
        """
        regex = re.compile(pattern)
        for number in range(max(line, 1), len(self._lines) + 1):
            if regex.search(_LITERAL_OR_COMMENT.sub(" ", self._lines[number - 1])):
                return number
        return line

    def _resolve(self, lexical: str) -> str:
        try:
            return self.unit.resolve(lexical)
        except Exception as e:
            logger.debug("Unresolved %s in %s (%s)", lexical, self.class_name, e)
            return lexical

    def _add_type(
        self, type_node, kind: DependencyKind, label: str, line: int, *, anchored: bool = False
    ) -> None:
        """Emit one edge for *type_node*.

        Class and interface types are resolved; primitive and array types are
        reported under their written name.  An *anchored* line is the
        reference's own recorded position and is used as is.
        """
        try:
            written = render_type(type_node)
            target = self._resolve(type_name(type_node)) if is_class_type(type_node) else written
            snippet = f"{label} {written}"
            if not anchored:
                line = self._locate(rf"(?<![\w.]){re.escape(type_node.name)}\b", line)
        except (AttributeError, TypeError) as e:
            logger.warning("Dropping %s edge in %s: %s", kind, self.class_name, e)
            return
        self._add(target, kind, snippet, line)

    def _add(self, target: str, kind: DependencyKind, snippet: str, line: int) -> None:
        if not self.is_reportable(target):
            return
        try:
            self.report.add_dependency(
                Dependency(self.class_name, target, kind, snippet, line)
            )
        except ValueError as e:
            logger.warning("Dropping %s edge in %s: %s", kind, self.class_name, e)


def extract_dependencies(unit: ParsedUnit) -> ClassReport:
    return DependencyExtractor(unit).extract()
