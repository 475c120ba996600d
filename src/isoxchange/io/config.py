"""
Configuration for isoxchange.

Defines ExchangeSettings, a frozen dataclass carrying runtime configuration for the
codec defaults, validation policy, and schema discovery. Values load with
precedence env > TOML > defaults.

Sources
- TOML: ./isoxchange.toml (top-level [exchange] table or direct keys), else
  ./pyproject.toml under [tool.isoxchange].
- Environment: ISOXCHANGE_* variables (see `from_env`).

Import DAG discipline
- Depends on stdlib and isoxchange.core; never imported by isoxchange.core.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from isoxchange.core.codec import CodecOptions
from isoxchange.core.constants import SCHEMA_PATTERN
from isoxchange.core.encoding import Encoding, encoding_from_value
from isoxchange.core.schema_set import SchemaAggregator, ValidationPolicy

from .errors import IoConfigError
from .sources import load_folder

logger = logging.getLogger(__name__)

_BOOL_FIELDS = (
    "bom",
    "namespace",
    "use_validation",
    "use_with_errors",
    "use_with_warnings",
    "schema_recursive",
)


def _bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
    return False


@dataclass(frozen=True)
class ExchangeSettings:
    """
    Runtime settings for codec defaults, validation, and schema discovery.

    Attributes:
        encoding (Encoding): Default wire encoding for message wrappers.
        bom (bool): [XML] prefix output with a byte-order mark.
        namespace (bool): [XML] emit/require the document namespace.
        use_validation (bool): Validate XML traffic when schemas are available.
        use_with_errors (bool): Accept documents despite validation errors.
        use_with_warnings (bool): Accept documents with validation warnings.
        schema_dir (str | None): Folder holding XSD definitions to preload.
        schema_pattern (str): Glob filter for schema files.
        schema_recursive (bool): Include sub-folders of schema_dir.

    Examples:
        >>> ExchangeSettings(encoding=Encoding.XML).codec_options()
        CodecOptions(bom=False, namespace=False, exclude_none=True)
    """

    encoding: Encoding = Encoding.JSON
    bom: bool = False
    namespace: bool = False
    use_validation: bool = True
    use_with_errors: bool = False
    use_with_warnings: bool = True
    schema_dir: str | None = None
    schema_pattern: str = SCHEMA_PATTERN
    schema_recursive: bool = False

    # Derived core objects

    def codec_options(self) -> CodecOptions:
        return CodecOptions(bom=self.bom, namespace=self.namespace)

    def validation_policy(self) -> ValidationPolicy:
        return ValidationPolicy(
            use_with_errors=self.use_with_errors, use_with_warnings=self.use_with_warnings
        )

    def build_aggregator(self) -> SchemaAggregator:
        """
        Create a SchemaAggregator with this policy, preloaded from schema_dir when set.

        Raises:
            IoConfigError: If schema_dir is set but is not a directory.
        """
        aggregator = SchemaAggregator(policy=self.validation_policy())
        if self.schema_dir:
            if not Path(self.schema_dir).is_dir():
                raise IoConfigError(f"schema_dir is not a directory: {self.schema_dir!r}")
            if not load_folder(
                aggregator, self.schema_dir, self.schema_pattern, self.schema_recursive
            ):
                logger.warning("some schema definitions under %s failed to load", self.schema_dir)
        return aggregator

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: ExchangeSettings, cfg: dict[str, Any] | None) -> ExchangeSettings:
        """Apply a loose config mapping onto ExchangeSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        if "encoding" in cfg:
            try:
                s = replace(s, encoding=encoding_from_value(cfg["encoding"]))
            except ValueError:
                logger.warning("ignoring unknown encoding %r", cfg["encoding"])

        for name in _BOOL_FIELDS:
            if name in cfg:
                s = replace(s, **{name: _bool(cfg[name])})

        if "schema_dir" in cfg and isinstance(cfg["schema_dir"], str):
            s = replace(s, schema_dir=cfg["schema_dir"] or None)
        if "schema_pattern" in cfg and isinstance(cfg["schema_pattern"], str) and cfg["schema_pattern"]:
            s = replace(s, schema_pattern=cfg["schema_pattern"])

        return s

    @classmethod
    def from_env(
        cls, base: ExchangeSettings | None = None, prefix: str = "ISOXCHANGE_"
    ) -> ExchangeSettings:
        """
        Build ExchangeSettings from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - ISOXCHANGE_ENCODING ("json" | "xml")
            - ISOXCHANGE_BOM, ISOXCHANGE_NAMESPACE
            - ISOXCHANGE_USE_VALIDATION, ISOXCHANGE_USE_WITH_ERRORS, ISOXCHANGE_USE_WITH_WARNINGS
              (1/0/true/false/yes/no/on/off)
            - ISOXCHANGE_SCHEMA_DIR, ISOXCHANGE_SCHEMA_PATTERN, ISOXCHANGE_SCHEMA_RECURSIVE
        """
        s = base or cls()

        mapping: dict[str, Any] = {}
        for name in ("encoding", "schema_dir", "schema_pattern", *_BOOL_FIELDS):
            v = os.getenv(prefix + name.upper())
            if v:
                mapping[name] = v

        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> ExchangeSettings:
        """
        Build ExchangeSettings from a TOML file.

        Search order when `path` is None:
            1) ./isoxchange.toml (with either top-level [exchange] or direct keys)
            2) ./pyproject.toml under [tool.isoxchange]

        Returns defaults if no file is present or it cannot be parsed.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                logger.warning("cannot read %s: %s", p, exc)
                return None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "isoxchange.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("isoxchange") if isinstance(tool, dict) else None
            elif isinstance(data.get("exchange"), dict):
                cfg = data["exchange"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> ExchangeSettings:
        """
        Load ExchangeSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (isoxchange.toml, pyproject.toml).
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
