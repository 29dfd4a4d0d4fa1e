"""
Lint Engine.

Drives one module through the pipeline:

1.  Parse with LibCST (syntax errors become `LintResult.errors`).
2.  Index module-level declarations (`ModuleIndexer`).
3.  Collect call sites (`CallSiteCollector`).
4.  Match each call against the registry and validate the matched ones.

The engine holds only immutable state, so one instance may lint many files
concurrently.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional

import libcst as cst
from libcst.metadata import MetadataWrapper
from pydantic import BaseModel, Field

from pairlint.analysis.call_sites import CallSiteCollector
from pairlint.analysis.indexer import ModuleIndexer
from pairlint.config import LintConfig
from pairlint.core.descriptors import CallSiteDescriptor
from pairlint.core.diagnostics import CollectingSink, Diagnostic, DiagnosticSink
from pairlint.core.matcher import CallMatcher
from pairlint.core.selectors import Registry
from pairlint.core.validator import PairValidator
from pairlint.utils.files import iter_source_files, module_name_for

logger = logging.getLogger(__name__)


class LintResult(BaseModel):
  """
  Outcome of linting one module.
  """

  path: Optional[str] = Field(None, description="Source file, when linting from disk.")
  module: str = Field("__main__", description="Dotted module name used for resolution.")
  diagnostics: List[Diagnostic] = Field(default_factory=list, description="Findings, sorted by position.")
  errors: List[str] = Field(default_factory=list, description="Fatal per-file problems (parse errors).")
  success: bool = Field(default=True, description="False if the module could not be analyzed.")

  @property
  def has_errors(self) -> bool:
    return len(self.errors) > 0

  @property
  def has_diagnostics(self) -> bool:
    return len(self.diagnostics) > 0


class PairsEngine:
  """
  Front end + matcher + validator for Python modules.

  Attributes:
      registry: Immutable rule tables.
      config: Behavioral switches (untyped keys, dynamic receivers, jobs).
  """

  def __init__(self, registry: Registry, config: Optional[LintConfig] = None):
    self.registry = registry
    self.config = config or LintConfig()
    self.matcher = CallMatcher(registry, dynamic_receivers=self.config.dynamic_receivers)
    self.validator = PairValidator(registry, report_untyped_keys=self.config.report_untyped_keys)

  @classmethod
  def from_config(cls, config: LintConfig) -> "PairsEngine":
    """
    Builds the registry from the config's specifications.

    Raises:
        ConfigurationError: If a specification is malformed.
    """
    return cls(config.build_registry(), config)

  def check_call(self, call_site: CallSiteDescriptor, sink: DiagnosticSink, path: Optional[str] = None) -> int:
    """
    Matches and validates a single call, reporting into `sink`.

    Returns:
        int: Number of diagnostics reported.
    """
    match = self.matcher.match(call_site)
    if match is None:
      return 0

    found = self.validator.validate(call_site, match.offset, match.display_name)
    for diagnostic in found:
      sink.report(diagnostic.model_copy(update={"path": path}))
    return len(found)

  def run(self, code: str, module: str = "__main__", path: Optional[str] = None, is_package: bool = False) -> LintResult:
    """
    Lints a string of Python source.

    Args:
        code: Module source.
        module: Dotted module name, used to qualify local definitions.
        path: Reported file path.
        is_package: True for a package `__init__` (relative imports).

    Returns:
        LintResult: Diagnostics or parse errors.
    """
    try:
      tree = cst.parse_module(code)
    except cst.ParserSyntaxError as e:
      return LintResult(path=path, module=module, errors=[f"Syntax error: {e}"], success=False)

    indexer = ModuleIndexer(module, is_package=is_package)
    tree.visit(indexer)

    collector = CallSiteCollector(indexer.index, is_package=is_package)
    MetadataWrapper(tree).visit(collector)

    sink = CollectingSink()
    for call_site in collector.call_sites:
      self.check_call(call_site, sink, path)

    if collector.skipped:
      logger.debug("%s: %d call(s) skipped for star-args", path or module, collector.skipped)

    return LintResult(path=path, module=module, diagnostics=sink.diagnostics)

  def lint_file(self, path: Path) -> LintResult:
    """
    Lints one file from disk, deriving its module name from the package layout.
    """
    module, is_package = module_name_for(path)
    try:
      code = path.read_text("utf-8")
    except (OSError, UnicodeDecodeError) as e:
      return LintResult(path=str(path), module=module, errors=[f"Failed to read: {e}"], success=False)
    return self.run(code, module=module, path=str(path), is_package=is_package)

  def lint_paths(self, paths: Iterable[Path]) -> List[LintResult]:
    """
    Lints every Python file under `paths`.

    Files are independent, so with `config.jobs > 1` they are processed on a
    thread pool. Results come back in file order regardless.
    """
    files = list(iter_source_files(paths, self.config.exclude))
    if self.config.jobs > 1 and len(files) > 1:
      with ThreadPoolExecutor(max_workers=self.config.jobs) as pool:
        return list(pool.map(self.lint_file, files))
    return [self.lint_file(f) for f in files]
