"""
Source file discovery and module naming.
"""

from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple


def _excluded(path: Path, patterns: List[str]) -> bool:
  text = path.as_posix()
  return any(fnmatch(text, pattern) or fnmatch(path.name, pattern) for pattern in patterns)


def iter_source_files(paths: Iterable[Path], exclude: Iterable[str] = ()) -> Iterator[Path]:
  """
  Yields `.py` files: files as given, directories recursively (sorted).

  Args:
      paths: Files or directories.
      exclude: Glob patterns matched against the posix path or the file name.
  """
  patterns = list(exclude)
  for path in paths:
    if path.is_dir():
      for f in sorted(path.rglob("*.py")):
        if not _excluded(f, patterns):
          yield f
    elif not _excluded(path, patterns):
      yield path


def module_name_for(path: Path) -> Tuple[str, bool]:
  """
  Derives the dotted module name by walking up through package directories.

  `src/acme/log/__init__.py` -> ("acme.log", True) when `src` has no `__init__.py`.

  Returns:
      Tuple[str, bool]: Module name and whether the file is a package `__init__`.
  """
  path = path.resolve()
  is_package = path.stem == "__init__"
  parts = [] if is_package else [path.stem]

  parent = path.parent
  while (parent / "__init__.py").exists():
    parts.insert(0, parent.name)
    if parent.parent == parent:
      break
    parent = parent.parent

  return ".".join(parts) or path.stem, is_package
