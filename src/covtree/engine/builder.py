"""Build a canonical coverage tree from leaf facts reported by adapters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from covtree.config import DEFAULT_ROOT_NAME
from covtree.errors import MalformedPathError
from covtree.model.node import CoverageNode
from covtree.model.ratio import UNSET, Ratio
from covtree.model.result import BuildIssue, CoverageResult
from covtree.model.types import STRUCTURAL_LEVELS, CoverageLevel

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = logging.getLogger("covtree")

# Segments up to and including the file: module, package, file.
FILE_DEPTH = STRUCTURAL_LEVELS.index(CoverageLevel.FILE) + 1


@dataclass(frozen=True, slots=True)
class LeafFact:
    """A ratio measured at *level* for the entity named by *path*.

    ``path`` lists segment names outermost first: module, flat package name,
    file and, when the report has that granularity, class and method.
    """

    path: tuple[str, ...]
    level: CoverageLevel
    ratio: Ratio


def validate_path(path: Sequence[str], level: CoverageLevel) -> tuple[str, ...]:
    """Return *path* as a tuple, or raise :class:`MalformedPathError`."""
    if isinstance(path, str):
        msg = "path must be a sequence of segment names, not a string"
        raise MalformedPathError(msg)
    try:
        segments = tuple(path)
    except TypeError as exc:
        msg = f"path must be a sequence of segment names, got {type(path).__name__}"
        raise MalformedPathError(msg) from exc
    if not segments:
        msg = "path is empty"
        raise MalformedPathError(msg)
    for segment in segments:
        if not isinstance(segment, str) or not segment.strip():
            msg = f"path contains an empty or non-text segment: {segment!r}"
            raise MalformedPathError(msg)
    if len(segments) < FILE_DEPTH:
        msg = f"path must reach the file level ({FILE_DEPTH} segments), got {len(segments)}"
        raise MalformedPathError(msg)
    if len(segments) > len(STRUCTURAL_LEVELS):
        msg = f"path is deeper than the method level ({len(STRUCTURAL_LEVELS)} segments), got {len(segments)}"
        raise MalformedPathError(msg)
    if not isinstance(level, CoverageLevel) or level is CoverageLevel.REPORT:
        msg = f"invalid coverage level: {level!r}"
        raise MalformedPathError(msg)
    target = STRUCTURAL_LEVELS[len(segments) - 1]
    if level < target:
        msg = f"a {level.name} count cannot be attached to a {target.name} node"
        raise MalformedPathError(msg)
    return segments


def _display_path(path: object) -> tuple[str, ...]:
    if isinstance(path, str):
        return (path,)
    try:
        return tuple(str(segment) for segment in path)  # type: ignore[attr-defined]
    except TypeError:
        return (repr(path),)


class TreeBuilder:
    """Single-writer accumulator of leaf facts for one build.

    Facts for the same node and level are merged by adding their ratios, in any
    order. Malformed facts are skipped and collected as :class:`BuildIssue`
    entries instead of aborting the build.
    """

    def __init__(
        self,
        *,
        root_name: str = DEFAULT_ROOT_NAME,
        owner: object = None,
        count_elements: bool = True,
    ) -> None:
        self._root = CoverageNode(CoverageLevel.REPORT, root_name)
        self._owner = owner
        self._count_elements = count_elements
        self._issues: list[BuildIssue] = []
        self._seen = 0
        self._built = False

    @property
    def issues(self) -> tuple[BuildIssue, ...]:
        return tuple(self._issues)

    def add(
        self,
        path: Sequence[str],
        level: CoverageLevel,
        ratio: Ratio,
        *,
        strict: bool = False,
    ) -> bool:
        """Merge one fact into the tree; return ``False`` when it was skipped."""
        if self._built:
            msg = "facts cannot be added after build()"
            raise RuntimeError(msg)
        index = self._seen
        self._seen += 1
        try:
            segments = validate_path(path, level)
            if not isinstance(ratio, Ratio):
                msg = f"expected a Ratio, got {type(ratio).__name__}"
                raise MalformedPathError(msg)
        except MalformedPathError as exc:
            if strict:
                raise
            issue = BuildIssue(index=index, path=_display_path(path), reason=str(exc))
            self._issues.append(issue)
            logger.warning("skipping %s", issue)
            return False

        node = self._root
        for depth, segment in enumerate(segments):
            node = node.get_or_create_child(STRUCTURAL_LEVELS[depth], segment)
        node.add_leaf_count(level, ratio)
        return True

    def extend(self, facts: Iterable[LeafFact | tuple[Sequence[str], CoverageLevel, Ratio]]) -> int:
        """Add every fact of *facts*; return the number of facts accepted."""
        accepted = 0
        for fact in facts:
            if isinstance(fact, LeafFact):
                ok = self.add(fact.path, fact.level, fact.ratio)
            else:
                try:
                    path, level, ratio = fact
                except (TypeError, ValueError):
                    issue = BuildIssue(index=self._seen, path=(), reason=f"not a leaf fact: {fact!r}")
                    self._seen += 1
                    self._issues.append(issue)
                    logger.warning("skipping %s", issue)
                    continue
                ok = self.add(path, level, ratio)
            accepted += int(ok)
        return accepted

    def build(self) -> CoverageResult:
        """Finish the tree, freeze it and wrap it in a :class:`CoverageResult`."""
        if self._built:
            msg = "build() may only be called once"
            raise RuntimeError(msg)
        self._built = True
        if self._count_elements:
            for child in self._root.children:
                _stamp_element_counts(child)
        self._root.freeze()
        logger.debug(
            "built coverage tree %r from %d fact(s), %d skipped",
            self._root.name,
            self._seen,
            len(self._issues),
        )
        return CoverageResult(
            root=self._root, owner=self._owner, qualified_name=self._root.name, issues=tuple(self._issues)
        )


def _stamp_element_counts(node: CoverageNode) -> dict[CoverageLevel, Ratio]:
    """Give each structural node a 0/1 self count telling whether it is covered.

    Returns the rolled-up counts of *node* at every level finer than its own,
    so each subtree is visited once.
    """
    finer: dict[CoverageLevel, Ratio] = {}
    for child in node.children:
        for level, ratio in _stamp_element_counts(child).items():
            finer[level] = finer.get(level, UNSET).combine(ratio)
    for level, ratio in node.leaf_counts.items():
        if level.is_finer_than(node.level):
            finer[level] = finer.get(level, UNSET).combine(ratio)

    if node.level not in node.leaf_counts:
        measured = [ratio for ratio in finer.values() if ratio.is_set()]
        if measured:
            lines = finer.get(CoverageLevel.LINE, UNSET)
            covered = lines.covered > 0 if lines.is_set() else any(ratio.covered > 0 for ratio in measured)
            node.add_leaf_count(node.level, Ratio(covered=int(covered), total=1))

    out = dict(finer)
    out[node.level] = out.get(node.level, UNSET).combine(node.leaf_counts.get(node.level, UNSET))
    return out


def build_tree(
    facts: Iterable[LeafFact | tuple[Sequence[str], CoverageLevel, Ratio]],
    *,
    owner: object = None,
    root_name: str = DEFAULT_ROOT_NAME,
    count_elements: bool = True,
) -> CoverageResult:
    """Build one build's coverage tree; skipped facts are listed in ``result.issues``."""
    builder = TreeBuilder(root_name=root_name, owner=owner, count_elements=count_elements)
    builder.extend(facts)
    return builder.build()


__all__ = ["FILE_DEPTH", "LeafFact", "TreeBuilder", "build_tree", "validate_path"]
