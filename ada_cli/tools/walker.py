import logging
import os

from typing import Iterator, List, Optional, Tuple

import pathspec

logger = logging.getLogger(__name__)

ALWAYS_SKIPPED = (".git",)

IgnoreRules = List[Tuple[str, pathspec.PathSpec]]


def find_repo_root(path: str) -> Optional[str]:
    """Returns the closest directory at or above `path` that holds a .git entry."""
    current = os.path.abspath(path)
    while True:
        if os.path.exists(os.path.join(current, ".git")):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def _load_spec(path: str) -> Optional[pathspec.PathSpec]:
    if not os.path.isfile(path):
        return None
    try:
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            return pathspec.GitIgnoreSpec.from_lines(f)
    except OSError as e:
        logger.warning("Could not read ignore file %s: %s", path, e)
        return None


def _initial_rules(root: str) -> IgnoreRules:
    """
    Collects the ignore rules that already apply at `root`.

    Inside a git work tree that is .git/info/exclude plus every .gitignore
    from the repository root down to `root`. Outside one, only the
    .gitignore in `root` itself.
    """
    root = os.path.abspath(root)
    repo_root = find_repo_root(root)
    if repo_root is None:
        directories = [root]
    else:
        directories = [repo_root]
        relative = os.path.relpath(root, repo_root)
        if relative != ".":
            current = repo_root
            for part in relative.split(os.sep):
                current = os.path.join(current, part)
                directories.append(current)

    rules = []
    if repo_root is not None:
        spec = _load_spec(os.path.join(repo_root, ".git", "info", "exclude"))
        if spec is not None:
            rules.append((repo_root, spec))
    for directory in directories:
        spec = _load_spec(os.path.join(directory, ".gitignore"))
        if spec is not None:
            rules.append((directory, spec))
    return rules


def _is_ignored(path: str, is_dir: bool, rules: IgnoreRules) -> bool:
    path = os.path.abspath(path)
    for base, spec in rules:
        relpath = os.path.relpath(path, base)
        if relpath == os.pardir or relpath.startswith(os.pardir + os.sep):
            continue
        relpath = relpath.replace(os.sep, "/")
        # Trailing slash lets directory-only patterns such as "build/" match
        if is_dir:
            relpath += "/"
        if spec.match_file(relpath):
            return True
    return False


def walk(
    root: str, include_hidden: bool = False, max_depth: Optional[int] = None
) -> Iterator[Tuple[str, int, bool]]:
    """
    Yields (path, depth, is_dir) for every entry below `root`, sorted by name.

    The .git directory is never entered, and entries matched by a .gitignore
    (the search root's, those above it up to the repository root, and those
    nested below it) are skipped.
    """
    rules = _initial_rules(root)

    for dirpath, dirnames, filenames in os.walk(root):
        reldir = os.path.relpath(dirpath, root)
        depth = 0 if reldir == "." else reldir.count(os.sep) + 1
        if reldir != ".":
            spec = _load_spec(os.path.join(dirpath, ".gitignore"))
            if spec is not None:
                rules.append((os.path.abspath(dirpath), spec))

        kept_dirs = []
        for name in sorted(dirnames):
            path = os.path.join(dirpath, name)
            if name in ALWAYS_SKIPPED or (not include_hidden and name.startswith(".")):
                continue
            if _is_ignored(path, True, rules):
                continue
            if max_depth is not None and depth + 1 > max_depth:
                continue
            kept_dirs.append(name)
            yield path, depth + 1, True
        # Prune in place so os.walk does not descend into skipped directories
        dirnames[:] = kept_dirs

        if max_depth is not None and depth + 1 > max_depth:
            continue
        for name in sorted(filenames):
            path = os.path.join(dirpath, name)
            if not include_hidden and name.startswith("."):
                continue
            if _is_ignored(path, False, rules):
                continue
            yield path, depth + 1, False


def walk_files(root: str, include_hidden: bool = False) -> Iterator[str]:
    for path, _depth, is_dir in walk(root, include_hidden=include_hidden):
        if not is_dir:
            yield path
