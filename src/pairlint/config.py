"""
Linter Configuration.

`LintConfig` gathers the rule and whitelist specifications from
`[tool.pairlint]` in the nearest `pyproject.toml` and from CLI flags, and
builds the immutable `Registry` used by the engine.

Example ``pyproject.toml``::

    [tool.pairlint]
    pair_funcs = [".log=0", "acme.errors:wrap=2"]
    assume_pairs = ["acme.details.Pairs"]
    exclude = ["build/*"]
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from pairlint.core.selectors import ConfigurationError, Registry

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib


class LintConfig(BaseModel):
  """
  Configuration container for the lint engine.
  """

  pair_funcs: List[str] = Field(
    default_factory=list, description="Rule specs: `[pkg[.Type]].func=N` or `module:[Type.]func=N`."
  )
  assume_pairs: List[str] = Field(default_factory=list, description="Trusted container types: `pkg.Type`.")
  exclude: List[str] = Field(default_factory=list, description="Glob patterns of files to skip.")
  report_untyped_keys: bool = Field(False, description="Report keys whose type could not be inferred.")
  dynamic_receivers: bool = Field(True, description="Let untyped receivers match generic-method rules.")
  jobs: int = Field(1, ge=1, description="Worker threads used to lint files.")

  @field_validator("pair_funcs", "assume_pairs", "exclude")
  @classmethod
  def strip_entries(cls, v: List[str]) -> List[str]:
    """
    Drops blank entries and surrounding whitespace.

    Args:
        v (List[str]): Raw list from TOML or CLI.

    Returns:
        List[str]: Cleaned list.
    """
    return [item.strip() for item in v if item and item.strip()]

  def build_registry(self) -> Registry:
    """
    Parses every specification into the immutable registry.

    Returns:
        Registry: Rule and whitelist tables.

    Raises:
        ConfigurationError: On the first malformed specification.
    """
    return Registry.from_specs(self.pair_funcs, self.assume_pairs)

  @classmethod
  def load(
    cls,
    pair_funcs: Optional[List[str]] = None,
    assume_pairs: Optional[List[str]] = None,
    report_untyped_keys: Optional[bool] = None,
    dynamic_receivers: Optional[bool] = None,
    jobs: Optional[int] = None,
    search_path: Optional[Path] = None,
  ) -> "LintConfig":
    """
    Loads configuration from pyproject.toml and merges CLI arguments.

    CLI lists extend the TOML lists; CLI scalars override them.

    Args:
        pair_funcs (Optional[List[str]]): Extra rule specs.
        assume_pairs (Optional[List[str]]): Extra whitelist specs.
        report_untyped_keys (Optional[bool]): Override.
        dynamic_receivers (Optional[bool]): Override.
        jobs (Optional[int]): Override.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        LintConfig: The fully resolved configuration object.

    Raises:
        ConfigurationError: If a TOML or CLI value has the wrong type or range.
    """
    start_dir = search_path or Path.cwd()
    toml_config, _ = _load_toml_settings(start_dir)

    final_rules = _toml_list(toml_config, "pair_funcs") + list(pair_funcs or [])
    final_whitelist = _toml_list(toml_config, "assume_pairs") + list(assume_pairs or [])

    final_untyped = toml_config.get("report_untyped_keys", False) if report_untyped_keys is None else report_untyped_keys
    final_dynamic = toml_config.get("dynamic_receivers", True) if dynamic_receivers is None else dynamic_receivers

    try:
      return cls(
        pair_funcs=final_rules,
        assume_pairs=final_whitelist,
        exclude=_toml_list(toml_config, "exclude"),
        report_untyped_keys=final_untyped,
        dynamic_receivers=final_dynamic,
        jobs=toml_config.get("jobs", 1) if jobs is None else jobs,
      )
    except ValidationError as e:
      problems = "; ".join(f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors())
      raise ConfigurationError(f"invalid configuration: {problems}") from e


def _toml_list(settings: Dict[str, Any], key: str) -> List[Any]:
  """
  Reads a list-valued setting.

  A bare string would otherwise be split into characters.

  Raises:
      ConfigurationError: If the value is not a TOML array.
  """
  value = settings.get(key, [])
  if not isinstance(value, list):
    raise ConfigurationError(f"invalid configuration: {key} must be a list, got {type(value).__name__}")
  return list(value)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  current = start_path.resolve()
  if current.is_file():
    current = current.parent

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get("pairlint", {}), parent

  return {}, None
