"""Line classifier: comment-aware SLOC state machine.

Each physical line of a file is classified as empty, comment, or logical
code, according to the file's :class:`LanguageDefinition`. State carried
across lines is a single block-comment depth counter plus the delimiter
pair that opened the outermost block; it starts at zero for every file
and is never reset mid-file.

Comment tokens inside string literals are not recognized as such. The
classifier is line based and has no lexer.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable

import structlog

from slocscan.languages.models import BlockComment, LanguageDefinition
from slocscan.report.models import FileStat

log = structlog.get_logger("slocscan.classifier")


class LineKind(enum.Enum):
    EMPTY = "empty"
    COMMENT = "comment"
    LOGICAL = "logical"
    EXCLUDED = "excluded"  # preprocessor line dropped from every count


class LineClassifier:
    """Classify the lines of one file, in order.

    Create one instance per file; :meth:`classify` must see every line of the
    file exactly once and in sequence.
    """

    def __init__(self, definition: LanguageDefinition, exclude_preprocessor: bool = False) -> None:
        self.definition = definition
        self.exclude_preprocessor = exclude_preprocessor
        self.depth = 0
        self._active: BlockComment | None = None

    @property
    def in_block(self) -> bool:
        return self.depth > 0

    def classify(self, line: str) -> LineKind:
        entry_depth = self.depth
        stripped = line.strip()

        if not stripped:
            return LineKind.COMMENT if entry_depth > 0 else LineKind.EMPTY

        prefix = self.definition.preprocessor_prefix
        if entry_depth == 0 and prefix and stripped.startswith(prefix):
            # Directive lines count as code. Block state is still tracked so a
            # directive that opens a block comment leaves the next lines right.
            self._scan(line)
            return LineKind.EXCLUDED if self.exclude_preprocessor else LineKind.LOGICAL

        has_code, has_comment = self._scan(line)
        if has_code:
            return LineKind.LOGICAL
        if has_comment:
            return LineKind.COMMENT
        return LineKind.LOGICAL

    def _scan(self, line: str) -> tuple[bool, bool]:
        """Walk *line* left to right, updating depth.

        Returns ``(has_code, has_comment)``: whether any non-whitespace text
        sits outside comments, and whether any comment content was seen.
        """
        has_code = False
        has_comment = False
        pos = 0
        length = len(line)

        while pos < length:
            if self.depth == 0:
                idx, token, block = self._next_opening(line, pos)
                if idx < 0:
                    if line[pos:].strip():
                        has_code = True
                    break
                if line[pos:idx].strip():
                    has_code = True
                has_comment = True
                if block is None:
                    # Single-line comment: the rest of the line is comment text.
                    break
                self.depth = 1
                self._active = block
                pos = idx + len(token)
                continue

            has_comment = True
            block = self._active
            if block is None:
                break
            if self._nests(block):
                start_idx = line.find(block.start, pos)
                end_idx = line.find(block.end, pos)
                if start_idx >= 0 and (end_idx < 0 or start_idx < end_idx):
                    self.depth += 1
                    pos = start_idx + len(block.start)
                elif end_idx >= 0:
                    self.depth -= 1
                    pos = end_idx + len(block.end)
                else:
                    break
            else:
                end_idx = line.find(block.end, pos)
                if end_idx < 0:
                    break
                self.depth = 0
                pos = end_idx + len(block.end)

            if self.depth == 0:
                self._active = None

        return has_code, has_comment

    def _nests(self, block: BlockComment) -> bool:
        # Identical open/close tokens (Python triple quotes) cannot nest.
        return self.definition.nested and block.start != block.end

    def _next_opening(self, line: str, pos: int) -> tuple[int, str, BlockComment | None]:
        """Earliest line-comment or block-start token at or after *pos*.

        Ties go to the longer token. Returns ``(-1, "", None)`` when none.
        """
        best_idx = -1
        best_token = ""
        best_block: BlockComment | None = None

        candidates: list[tuple[str, BlockComment | None]] = [
            (token, None) for token in self.definition.line_comments
        ]
        candidates.extend((block.start, block) for block in self.definition.block_comments)

        for token, block in candidates:
            idx = line.find(token, pos)
            if idx < 0:
                continue
            if (
                best_idx < 0
                or idx < best_idx
                or (idx == best_idx and len(token) > len(best_token))
            ):
                best_idx, best_token, best_block = idx, token, block
        return best_idx, best_token, best_block


def classify_lines(
    path: str,
    lines: Iterable[str],
    definition: LanguageDefinition,
    exclude_preprocessor: bool = False,
) -> FileStat:
    """Classify every line of one file and return its :class:`FileStat`.

    An unterminated block comment at end of file is not an error; its lines
    were already counted as comment.
    """
    classifier = LineClassifier(definition, exclude_preprocessor)
    counts = {LineKind.EMPTY: 0, LineKind.COMMENT: 0, LineKind.LOGICAL: 0, LineKind.EXCLUDED: 0}
    for line in lines:
        counts[classifier.classify(line)] += 1
    if classifier.in_block:
        log.debug("classifier.unterminated_block", path=path, depth=classifier.depth)

    logical = counts[LineKind.LOGICAL]
    comment = counts[LineKind.COMMENT]
    empty = counts[LineKind.EMPTY]
    return FileStat(
        path=path,
        language=definition.name,
        total=logical + comment + empty,
        logical=logical,
        comment=comment,
        empty=empty,
    )
