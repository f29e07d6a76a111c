"""Per-directory ignore files with gitignore-style patterns.

A ``.neocitiesignore`` file applies to the directory holding it and to
everything below that directory, never to siblings or parents. Patterns are
interpreted relative to the directory of the ignore file, as git does for
``.gitignore``.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pathspec import GitIgnoreSpec

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".neocitiesignore"


@dataclass
class IgnoreRule:
    """Patterns loaded from one ignore file."""

    base: str
    """Directory of the ignore file, relative to the scan root ("" for the root)"""

    spec: GitIgnoreSpec
    """Compiled gitignore patterns"""

    def applies_to(self, relative_path: str) -> bool:
        return not self.base or relative_path.startswith(self.base + "/")

    def match(self, relative_path: str, is_dir: bool) -> Optional[bool]:
        """Match a path against the patterns of this rule.

        Returns:
            True if the last matching pattern ignores the path, False if it
            re-includes it (``!pattern``), None if no pattern matches
        """
        local = relative_path[len(self.base) + 1 :] if self.base else relative_path
        if is_dir:
            local += "/"
        decision = None
        for pattern in self.spec.patterns:
            if pattern.include is None:
                continue
            if pattern.match_file(local) is not None:
                decision = pattern.include
        return decision


def load_ignore_file(path: Path, base: str) -> Optional[IgnoreRule]:
    """Load an ignore file if it exists.

    Args:
        path: Path of the ignore file
        base: Directory of the ignore file relative to the scan root

    Returns:
        IgnoreRule, or None if the file does not exist

    Raises:
        OSError: If the file exists but cannot be read
    """
    if not path.is_file():
        return None
    lines = path.read_text(encoding="utf-8").splitlines()
    logger.debug("Loaded %d ignore pattern line(s) from %s", len(lines), path)
    return IgnoreRule(base=base, spec=GitIgnoreSpec.from_lines(lines))


class IgnoreFileManager:
    """Collects ignore rules while a tree is walked.

    Rules are kept per directory; a path is checked against the rules of
    all its ancestor directories, shallowest first, and the last matching
    pattern wins. Deeper ignore files therefore override shallower ones.

    Examples:
        >>> manager = IgnoreFileManager(Path("/site"))
        >>> manager.load_from_directory(Path("/site"))
        >>> manager.is_ignored("drafts/post.html")
    """

    def __init__(self, base_path: Path):
        self.base_path = base_path
        self._rules: list[IgnoreRule] = []

    @property
    def rules(self) -> list[IgnoreRule]:
        return list(self._rules)

    def load_from_directory(self, directory: Path) -> None:
        """Load the ignore file of ``directory``, if any."""
        relative = directory.relative_to(self.base_path).as_posix()
        base = "" if relative == "." else relative
        rule = load_ignore_file(directory / IGNORE_FILE_NAME, base)
        if rule is not None:
            self._rules.append(rule)
            # Keep shallow rules first so deeper ones are evaluated last
            self._rules.sort(key=lambda r: r.base.count("/") + bool(r.base))

    def is_ignored(self, relative_path: str, is_dir: bool = False) -> bool:
        """Check whether a path relative to the scan root is ignored."""
        decision: Optional[bool] = None
        for rule in self._rules:
            if not rule.applies_to(relative_path):
                continue
            matched = rule.match(relative_path, is_dir)
            if matched is not None:
                decision = matched
        return bool(decision)
