"""javalang glue: parse Java source into a unit the extractor can walk."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

import javalang

from depscope.errors import ParseFailure
from depscope.resolver import ResolutionScope, SymbolResolver

logger = logging.getLogger(__name__)

UNKNOWN_CLASS = "UnknownClass"

_TYPE_DECLS = (
    javalang.tree.ClassDeclaration,
    javalang.tree.InterfaceDeclaration,
    javalang.tree.EnumDeclaration,
)


def is_class_or_interface(node) -> bool:
    return isinstance(
        node, (javalang.tree.ClassDeclaration, javalang.tree.InterfaceDeclaration)
    ) and not isinstance(node, javalang.tree.AnnotationDeclaration)


def _iter_declared_types(type_decl, prefix: str) -> Iterator[tuple[str, str]]:
    """Yield ``(simple_name, qualified_name)`` for a type and its member types."""
    qualified = f"{prefix}.{type_decl.name}" if prefix else type_decl.name
    yield type_decl.name, qualified
    for member in getattr(type_decl, "body", None) or []:
        if isinstance(member, _TYPE_DECLS):
            yield from _iter_declared_types(member, qualified)


@dataclass
class ParsedUnit:
    """A parsed compilation unit plus the naming context it was parsed in."""

    path: Path | None
    source: str
    tree: javalang.tree.CompilationUnit
    resolver: SymbolResolver
    scope: ResolutionScope

    @property
    def package_name(self) -> str | None:
        if self.tree.package is None:
            return None
        return self.tree.package.name

    @property
    def main_type_name(self) -> str:
        """Name of the first top-level class or interface declaration."""
        for type_decl in self.tree.types or []:
            if is_class_or_interface(type_decl):
                return type_decl.name
        return UNKNOWN_CLASS

    @property
    def class_name(self) -> str:
        package = self.package_name
        name = self.main_type_name
        return f"{package}.{name}" if package else name

    def resolve(self, name: str) -> str:
        return self.resolver.resolve(name, self.scope)


class JavaSourceParser:
    """Parse Java source text with javalang, resolving names via *resolver*."""

    def __init__(self, resolver: SymbolResolver | None = None) -> None:
        self.resolver = resolver or SymbolResolver()

    def with_source_roots(self, roots: Iterable[Path]) -> JavaSourceParser:
        """Return a parser whose resolver also indexes the types under *roots*."""
        return JavaSourceParser(self.resolver.with_source_roots(roots))

    def parse(self, source: str, path: Path | None = None) -> ParsedUnit:
        name = path or Path("<source>")
        try:
            tree = javalang.parse.parse(source)
        except javalang.parser.JavaSyntaxError as e:
            raise ParseFailure(name, e.description) from e
        except javalang.tokenizer.LexerError as e:
            raise ParseFailure(name, str(e)) from e
        except Exception as e:
            # javalang occasionally fails with non-syntax errors on odd input
            raise ParseFailure(name, repr(e)) from e

        package = tree.package.name if tree.package is not None else None
        declared: dict[str, str] = {}
        for type_decl in tree.types or []:
            if isinstance(type_decl, _TYPE_DECLS):
                declared.update(_iter_declared_types(type_decl, package or ""))

        scope = ResolutionScope.from_imports(
            package,
            ((imp.path, imp.static, imp.wildcard) for imp in tree.imports or []),
            declared_types=declared,
        )
        logger.debug("Parsed %s: %d imports, %d types", name, len(tree.imports or []), len(declared))
        return ParsedUnit(path=path, source=source, tree=tree, resolver=self.resolver, scope=scope)
