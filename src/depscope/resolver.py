"""Best-effort resolution of Java type names to fully-qualified names.

Resolution knows two kinds of type sources: a fixed table of JDK types (the
equivalent of a reflection-based solver, always available) and zero or more
:class:`SourceRepository` indexes built from project source roots.  A
resolver is immutable; :meth:`SymbolResolver.with_source_roots` returns a new
one, so concurrent analyses never observe each other's configuration.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from depscope.discovery import iter_compilation_units, scan_package_name

logger = logging.getLogger(__name__)

# JDK types visible to the reflection-only resolver, by package.
_JDK_TYPES: dict[str, frozenset[str]] = {
    "java.lang": frozenset(
        {
            # Interfaces and annotations.
            "Appendable", "AutoCloseable", "CharSequence", "Cloneable",
            "Comparable", "Deprecated", "FunctionalInterface", "Iterable",
            "Override", "ProcessHandle", "Readable", "Runnable", "SafeVarargs",
            "SuppressWarnings",
            # Classes.
            "Boolean", "Byte", "Character", "Class", "ClassLoader",
            "ClassValue", "Double", "Enum", "Float", "InheritableThreadLocal",
            "Integer", "Long", "Math", "Module", "ModuleLayer", "Number",
            "Object", "Package", "Process", "ProcessBuilder", "Record",
            "Runtime", "RuntimePermission", "ScopedValue", "SecurityManager",
            "Short", "StackTraceElement", "StackWalker", "StrictMath",
            "String", "StringBuffer", "StringBuilder", "StringTemplate",
            "System", "Thread", "ThreadGroup", "ThreadLocal", "Throwable",
            "Void",
            # Exceptions.
            "ArithmeticException", "ArrayIndexOutOfBoundsException",
            "ArrayStoreException", "ClassCastException",
            "ClassNotFoundException", "CloneNotSupportedException",
            "EnumConstantNotPresentException", "Exception",
            "IllegalAccessException", "IllegalArgumentException",
            "IllegalCallerException", "IllegalMonitorStateException",
            "IllegalStateException", "IllegalThreadStateException",
            "IndexOutOfBoundsException", "InstantiationException",
            "InterruptedException", "LayerInstantiationException",
            "MatchException", "NegativeArraySizeException",
            "NoSuchFieldException", "NoSuchMethodException",
            "NullPointerException", "NumberFormatException",
            "ReflectiveOperationException", "RuntimeException",
            "SecurityException", "StringIndexOutOfBoundsException",
            "TypeNotPresentException", "UnsupportedOperationException",
            "WrongThreadException",
            # Errors.
            "AbstractMethodError", "AssertionError", "BootstrapMethodError",
            "ClassCircularityError", "ClassFormatError", "Error",
            "ExceptionInInitializerError", "IllegalAccessError",
            "IncompatibleClassChangeError", "InstantiationError",
            "InternalError", "LinkageError", "NoClassDefFoundError",
            "NoSuchFieldError", "NoSuchMethodError", "OutOfMemoryError",
            "StackOverflowError", "ThreadDeath", "UnknownError",
            "UnsatisfiedLinkError", "UnsupportedClassVersionError",
            "VerifyError", "VirtualMachineError",
        }
    ),
    "java.util": frozenset(
        {
            "AbstractList", "AbstractMap", "ArrayDeque", "ArrayList", "Arrays",
            "BitSet", "Collection", "Collections", "Comparator", "Date",
            "Deque", "EnumMap", "EnumSet", "HashMap", "HashSet", "Iterator",
            "LinkedHashMap", "LinkedHashSet", "LinkedList", "List", "Locale",
            "Map", "NavigableMap", "NoSuchElementException", "Objects",
            "Optional", "PriorityQueue", "Properties", "Queue", "Random",
            "Scanner", "Set", "SortedMap", "SortedSet", "Stack", "TreeMap",
            "TreeSet", "UUID", "Vector",
        }
    ),
    "java.util.concurrent": frozenset(
        {
            "Callable", "CompletableFuture", "ConcurrentHashMap",
            "CountDownLatch", "ExecutionException", "Executor",
            "ExecutorService", "Executors", "Future", "TimeUnit",
        }
    ),
    "java.util.function": frozenset(
        {"BiFunction", "Consumer", "Function", "Predicate", "Supplier"}
    ),
    "java.util.stream": frozenset({"Collectors", "IntStream", "Stream"}),
    "java.io": frozenset(
        {
            "BufferedReader", "BufferedWriter", "File", "FileInputStream",
            "FileOutputStream", "FileReader", "FileWriter", "IOException",
            "InputStream", "InputStreamReader", "OutputStream", "PrintStream",
            "PrintWriter", "Reader", "Serializable", "UncheckedIOException",
            "Writer",
        }
    ),
    "java.math": frozenset({"BigDecimal", "BigInteger", "MathContext", "RoundingMode"}),
    "java.time": frozenset(
        {"Duration", "Instant", "LocalDate", "LocalDateTime", "LocalTime", "ZonedDateTime"}
    ),
    "java.text": frozenset({"DateFormat", "MessageFormat", "NumberFormat", "SimpleDateFormat"}),
    "java.nio.file": frozenset({"Files", "Path", "Paths"}),
    "java.nio.charset": frozenset({"Charset", "StandardCharsets"}),
    "java.net": frozenset({"HttpURLConnection", "Socket", "URI", "URL"}),
}


class UnresolvedSymbol(Exception):
    """A type name could not be mapped to a fully-qualified name."""


@dataclass(frozen=True)
class ResolutionScope:
    """Names visible inside one compilation unit."""

    package: str | None = None
    single_imports: dict[str, str] = field(default_factory=dict)
    wildcard_packages: tuple[str, ...] = ()
    declared_types: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_imports(
        cls,
        package: str | None,
        imports: Iterable[tuple[str, bool, bool]],
        declared_types: dict[str, str] | None = None,
    ) -> ResolutionScope:
        """Build a scope from ``(path, is_static, is_wildcard)`` import triples.

        *declared_types* maps simple names of the types declared in the unit
        itself (top-level and nested) to their qualified names; these shadow
        imports.
        """
        single: dict[str, str] = {}
        wildcard: list[str] = []
        for path, is_static, is_wildcard in imports:
            if is_static:
                continue
            if is_wildcard:
                wildcard.append(path)
            else:
                single[path.rsplit(".", 1)[-1]] = path
        return cls(
            package=package,
            single_imports=single,
            wildcard_packages=tuple(wildcard),
            declared_types=dict(declared_types or {}),
        )


class SourceRepository:
    """Index of the types declared by the compilation units under a root."""

    def __init__(self, root: Path, types: Iterable[str]) -> None:
        self.root = root
        self.types = frozenset(types)

    @classmethod
    def scan(cls, root: Path) -> SourceRepository:
        types: set[str] = set()
        for java_file in iter_compilation_units(root):
            try:
                source = java_file.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.debug("Skipping %s while indexing: %s", java_file, e)
                continue
            package = scan_package_name(source)
            types.add(f"{package}.{java_file.stem}" if package else java_file.stem)
        logger.debug("Indexed %d types under %s", len(types), root)
        return cls(root, types)

    def __contains__(self, fqn: str) -> bool:
        return fqn in self.types


class SymbolResolver:
    """Resolve simple or partially-qualified type names within a scope."""

    def __init__(self, repositories: Iterable[SourceRepository] = ()) -> None:
        self.repositories = tuple(repositories)

    def with_source_roots(self, roots: Iterable[Path]) -> SymbolResolver:
        """Return a resolver that additionally knows the types under *roots*."""
        added = [SourceRepository.scan(root) for root in roots if root.is_dir()]
        return SymbolResolver([*self.repositories, *added])

    def is_known(self, fqn: str) -> bool:
        package, _, simple = fqn.rpartition(".")
        if simple in _JDK_TYPES.get(package, ()):
            return True
        return any(fqn in repo for repo in self.repositories)

    def resolve(self, name: str, scope: ResolutionScope) -> str:
        if not name:
            raise UnresolvedSymbol(name)
        head, _, rest = name.partition(".")
        if not rest:
            return self._resolve_simple(name, scope)
        try:
            outer = self._resolve_simple(head, scope)
        except UnresolvedSymbol:
            # Already qualified: java.util.List, com.acme.Widget
            if self.is_known(name):
                return name
            raise
        return f"{outer}.{rest}"

    def _resolve_simple(self, name: str, scope: ResolutionScope) -> str:
        declared = scope.declared_types.get(name)
        if declared:
            return declared

        imported = scope.single_imports.get(name)
        if imported:
            return imported

        local = f"{scope.package}.{name}" if scope.package else name
        if any(local in repo for repo in self.repositories):
            return local

        if name in _JDK_TYPES["java.lang"]:
            return f"java.lang.{name}"

        for package in scope.wildcard_packages:
            candidate = f"{package}.{name}"
            if self.is_known(candidate):
                return candidate

        raise UnresolvedSymbol(name)
