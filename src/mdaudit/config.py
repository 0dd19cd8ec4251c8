#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdaudit/config.py
"""Formatting configuration and ignore-rule resolution.

The audit core only consumes a :class:`ResolvedConfig`: a "skip this file"
flag and the :class:`FormatOptions` handed to the formatter. Producing it is
the job of a :class:`ConfigResolver`, which is injected wherever a document
is processed.

Two resolvers are provided:

- :class:`StaticConfigResolver` returns fixed options and matches ignore
  globs in memory, which is convenient for tests and embedding.
- :class:`FileSystemConfigResolver` reads an ignore file and discovers
  configuration next to each document. Options are merged with the following
  precedence (highest first):

  1. explicit overrides passed by the caller
  2. project configuration (``.mdaudit.toml``, ``.mdaudit.yaml``,
     ``.mdaudit.yml``, ``.mdaudit.json`` or ``[tool.mdaudit]`` in
     ``pyproject.toml``) found in the document's directory or a parent
  3. ``.editorconfig`` files found in the document's directory or a parent
  4. defaults inferred from the document's file extension

"""

from __future__ import annotations

import configparser
import fnmatch
import json
import logging
import re
import sys
from dataclasses import asdict, dataclass, field, replace
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence, get_args

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]

import yaml

from mdaudit.constants import (
    CONFIG_FILENAMES,
    DEFAULT_END_OF_LINE,
    DEFAULT_PARSER,
    EDITORCONFIG_FILENAME,
    IGNORE_FILENAME,
    PARSER_EXTENSIONS,
    PYPROJECT_FILENAME,
    PYPROJECT_SECTION,
    VALID_BULLETS,
    BulletChar,
    EndOfLine,
)
from mdaudit.exceptions import ConfigError

logger = logging.getLogger(__name__)

_END_OF_LINE_VALUES = get_args(EndOfLine)
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _normalize_key(key: str) -> str:
    """Convert ``endOfLine`` and ``end-of-line`` to ``end_of_line``."""
    return _CAMEL_BOUNDARY_RE.sub(r"_\1", key).replace("-", "_").lower()


# =============================================================================
# Options
# =============================================================================


@dataclass(frozen=True)
class FormatOptions:
    """Options passed to the formatter.

    Parameters
    ----------
    parser : str, default 'markdown'
        Name of the formatter to use (see :func:`mdaudit.formatter.get_formatter`)
    end_of_line : {'lf', 'crlf', 'cr', 'auto'}, default 'lf'
        Line ending of the canonical text. ``'auto'`` keeps the first line
        ending found in the input.
    bullet : {'-', '*', '+'} or None, default None
        Marker for unordered list items. None keeps the markers of the input.

    """

    parser: str = DEFAULT_PARSER
    end_of_line: EndOfLine = DEFAULT_END_OF_LINE
    bullet: Optional[BulletChar] = None

    def __post_init__(self) -> None:
        if not isinstance(self.parser, str) or not self.parser:
            raise ConfigError("parser must be a non-empty string", parameter_name="parser", parameter_value=self.parser)
        if self.end_of_line not in _END_OF_LINE_VALUES:
            raise ConfigError(
                f"end_of_line must be one of {', '.join(_END_OF_LINE_VALUES)}, got {self.end_of_line!r}",
                parameter_name="end_of_line",
                parameter_value=self.end_of_line,
            )
        if self.bullet is not None and self.bullet not in VALID_BULLETS:
            raise ConfigError(
                f"bullet must be one of {', '.join(VALID_BULLETS)}, got {self.bullet!r}",
                parameter_name="bullet",
                parameter_value=self.bullet,
            )

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        """Return the names of all options."""
        return tuple(cls.__dataclass_fields__)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], config_path: str | Path | None = None) -> "FormatOptions":
        """Create options from a mapping, validating keys and values.

        Parameters
        ----------
        mapping : Mapping
            Option values keyed by snake_case, kebab-case or camelCase names
        config_path : str or Path, optional
            File the mapping was read from, used in error messages

        Raises
        ------
        ConfigError
            If an option is unknown or has an invalid value

        """
        return cls().merged(mapping, config_path=config_path)

    def merged(self, mapping: Mapping[str, Any], config_path: str | Path | None = None) -> "FormatOptions":
        """Return a copy with the values of ``mapping`` applied on top."""
        known = self.field_names()
        updates: dict[str, Any] = {}
        for raw_key, value in mapping.items():
            key = _normalize_key(str(raw_key))
            if key not in known:
                raise ConfigError(
                    f"Unknown formatting option '{raw_key}'",
                    config_path=config_path,
                    parameter_name=str(raw_key),
                    parameter_value=value,
                )
            updates[key] = value
        try:
            return replace(self, **updates)
        except ConfigError as e:
            if config_path is None:
                raise
            raise ConfigError(
                e.message, config_path=config_path, parameter_name=e.parameter_name, parameter_value=e.parameter_value
            ) from e

    def to_dict(self) -> dict[str, Any]:
        """Return the options as a plain dictionary."""
        return asdict(self)


@dataclass(frozen=True)
class ResolvedConfig:
    """Outcome of resolving configuration for one document.

    Parameters
    ----------
    skip : bool
        True when ignore rules exempt the document from auditing and formatting
    options : FormatOptions or None
        Options for the formatter; None when the document is skipped
    sources : tuple of str
        Files that contributed to the options, lowest precedence first

    """

    skip: bool
    options: Optional[FormatOptions] = None
    sources: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def skipped(cls) -> "ResolvedConfig":
        """Build the result for an ignored document."""
        return cls(skip=True)

    @classmethod
    def of(cls, options: FormatOptions, sources: Iterable[str] = ()) -> "ResolvedConfig":
        """Build the result for an audited document."""
        return cls(skip=False, options=options, sources=tuple(sources))


class ConfigResolver(Protocol):
    """Resolves the configuration that applies to a document."""

    def resolve(self, path: Path) -> ResolvedConfig:
        """Return the resolved configuration for ``path``."""
        ...


def infer_parser(path: Path | str) -> str:
    """Infer the formatter parser name from a file extension.

    Unknown extensions fall back to ``'markdown'``.
    """
    return PARSER_EXTENSIONS.get(Path(path).suffix.lower(), DEFAULT_PARSER)


# =============================================================================
# Ignore rules
# =============================================================================


@lru_cache(maxsize=None)
def _path_glob_regex(pattern: str) -> re.Pattern[str]:
    """Compile a slash-separated ignore pattern.

    ``*``, ``?`` and character classes never match ``/``; only ``**`` crosses
    directory boundaries (``a/**/b`` also matches ``a/b``).
    """
    out: list[str] = []
    i = 0
    length = len(pattern)
    while i < length:
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        elif pattern[i] == "[" and pattern.find("]", i + 2) != -1:
            end = pattern.find("]", i + 2)
            body = pattern[i + 1 : end].replace("\\", "\\\\")
            if body.startswith("!"):
                body = "^" + body[1:]
            out.append(f"(?!/)[{body}]")
            i = end + 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(out))


@dataclass(frozen=True)
class IgnoreRule:
    """A single line of an ignore file."""

    pattern: str
    negated: bool = False
    directory_only: bool = False
    anchored: bool = False

    @classmethod
    def parse(cls, line: str) -> Optional["IgnoreRule"]:
        """Parse one ignore-file line, returning None for blanks and comments."""
        line = line.rstrip()
        if not line or line.startswith("#"):
            return None

        negated = line.startswith("!")
        if negated:
            line = line[1:]
        directory_only = line.endswith("/")
        line = line.rstrip("/")
        anchored = "/" in line
        line = line.lstrip("/")
        if not line:
            return None
        return cls(pattern=line, negated=negated, directory_only=directory_only, anchored=anchored)

    def matches(self, candidate: PurePosixPath, is_dir: bool) -> bool:
        """Check whether the rule matches one path (file or containing directory)."""
        if self.directory_only and not is_dir:
            return False
        if self.anchored:
            return _path_glob_regex(self.pattern).fullmatch(candidate.as_posix()) is not None
        return fnmatch.fnmatchcase(candidate.name, self.pattern)


class IgnoreRules:
    """Gitignore-style rules deciding which documents are skipped.

    A rule without a slash matches a file or directory name at any depth, a
    rule containing a slash is matched against the path relative to the
    rules' base directory, a trailing slash restricts a rule to directories
    and a leading ``!`` re-includes paths. The last matching rule wins.

    Parameters
    ----------
    rules : sequence of IgnoreRule
        Parsed rules in file order
    base_dir : Path
        Directory the rules are relative to

    """

    def __init__(self, rules: Sequence[IgnoreRule], base_dir: Path) -> None:
        self.rules = list(rules)
        self.base_dir = base_dir

    @classmethod
    def from_lines(cls, lines: Iterable[str], base_dir: Path) -> "IgnoreRules":
        """Parse rules from the lines of an ignore file."""
        rules = [rule for rule in (IgnoreRule.parse(line) for line in lines) if rule is not None]
        return cls(rules, base_dir)

    @classmethod
    def from_file(cls, path: Path, base_dir: Path | None = None) -> "IgnoreRules":
        """Read rules from ``path``; a missing file yields no rules."""
        base = base_dir if base_dir is not None else path.parent
        if not path.is_file():
            return cls([], base)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read ignore file: {e}", config_path=path, original_error=e) from e
        return cls.from_lines(text.splitlines(), base)

    def is_ignored(self, path: Path) -> bool:
        """Return True if ``path`` is excluded by the rules.

        Paths outside of the base directory are never ignored.
        """
        if not self.rules:
            return False
        try:
            relative = path.resolve().relative_to(self.base_dir.resolve())
        except ValueError:
            return False

        posix = PurePosixPath(relative.as_posix())
        # Every containing directory, then the file itself
        candidates = [(PurePosixPath(*posix.parts[: i + 1]), True) for i in range(len(posix.parts) - 1)]
        candidates.append((posix, False))

        ignored = False
        for rule in self.rules:
            if any(rule.matches(candidate, is_dir) for candidate, is_dir in candidates):
                ignored = not rule.negated
        return ignored


# =============================================================================
# Project configuration files
# =============================================================================


def _load_pyproject_section(pyproject_path: Path) -> dict[str, Any]:
    """Load the ``[tool.mdaudit]`` table of a pyproject.toml file.

    Returns an empty dict when the table is absent.

    Raises
    ------
    ConfigError
        If the file cannot be read or parsed, or the section is not a table

    """
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML: {e}", config_path=pyproject_path, original_error=e) from e
    except OSError as e:
        raise ConfigError(f"Cannot read file: {e}", config_path=pyproject_path, original_error=e) from e

    section = data.get("tool", {}).get(PYPROJECT_SECTION)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(
            f"[tool.{PYPROJECT_SECTION}] must be a table, got {type(section).__name__}", config_path=pyproject_path
        )
    return section


def load_config_file(config_path: Path | str) -> dict[str, Any]:
    """Load formatting configuration from a file.

    The format is detected from the file name:

    - ``pyproject.toml``: the ``[tool.mdaudit]`` table
    - ``.toml``: TOML
    - ``.yaml`` / ``.yml``: YAML
    - ``.json`` (or anything else): JSON

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        The configuration mapping (empty for an empty file)

    Raises
    ------
    ConfigError
        If the file is missing, malformed or does not contain a mapping

    """
    path = Path(config_path)
    if not path.is_file():
        raise ConfigError("Configuration file not found", config_path=path)

    if path.name == PYPROJECT_FILENAME:
        return _load_pyproject_section(path)

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            with open(path, "rb") as f:
                data = tomllib.load(f)
        else:
            text = path.read_text(encoding="utf-8")
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(text)
            else:
                data = json.loads(text) if text.strip() else {}
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML: {e}", config_path=path, original_error=e) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}", config_path=path, original_error=e) from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON: {e}", config_path=path, original_error=e) from e
    except OSError as e:
        raise ConfigError(f"Cannot read file: {e}", config_path=path, original_error=e) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}", config_path=path)
    return data


def find_config_in_parents(start_dir: Path) -> Optional[Path]:
    """Find the nearest project configuration file.

    Walks up from ``start_dir`` to the filesystem root, checking each
    directory for the dedicated configuration files and then for a
    ``pyproject.toml`` that has a ``[tool.mdaudit]`` table.

    Parameters
    ----------
    start_dir : Path
        Directory to start searching from

    Returns
    -------
    Path or None
        The first configuration file found

    """
    current = start_dir.resolve()
    while True:
        for filename in CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                return candidate

        pyproject_path = current / PYPROJECT_FILENAME
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except ConfigError:
                logger.debug("Ignoring unreadable %s", pyproject_path)

        parent = current.parent
        if parent == current:
            return None
        current = parent


# =============================================================================
# EditorConfig
# =============================================================================

_EDITORCONFIG_PREAMBLE = "__preamble__"


def _editorconfig_glob_to_regex(pattern: str) -> str:
    """Translate an EditorConfig section glob into a regular expression."""
    out: list[str] = []
    i = 0
    length = len(pattern)
    while i < length:
        char = pattern[i]
        if char == "*":
            if pattern.startswith("**", i):
                out.append(".*")
                i += 2
                continue
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(char))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end + 1
                continue
        elif char == "{":
            end = pattern.find("}", i + 1)
            if end == -1:
                out.append(re.escape(char))
            else:
                alternatives = pattern[i + 1 : end].split(",")
                out.append("(?:" + "|".join(_editorconfig_glob_to_regex(alt) for alt in alternatives) + ")")
                i = end + 1
                continue
        else:
            out.append(re.escape(char))
        i += 1
    return "".join(out)


def _editorconfig_section_matches(section: str, relative_path: str) -> bool:
    """Check whether an EditorConfig section applies to a path relative to its file."""
    if "/" in section:
        regex = _editorconfig_glob_to_regex(section.lstrip("/"))
    else:
        regex = "(?:.*/)?" + _editorconfig_glob_to_regex(section)
    return re.fullmatch(regex, relative_path) is not None


def _read_editorconfig(path: Path) -> configparser.ConfigParser:
    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        comment_prefixes=("#", ";"),
        inline_comment_prefixes=("#", ";"),
        default_section="__default__",
    )
    try:
        text = path.read_text(encoding="utf-8")
        parser.read_string(f"[{_EDITORCONFIG_PREAMBLE}]\n{text}", source=str(path))
    except (OSError, configparser.Error) as e:
        raise ConfigError(f"Invalid editorconfig: {e}", config_path=path, original_error=e) from e
    return parser


def load_editorconfig(file_path: Path) -> tuple[dict[str, str], list[str]]:
    """Collect EditorConfig properties applying to ``file_path``.

    ``.editorconfig`` files are gathered from the file's directory upward
    until one declares ``root = true``. Nearer files override farther ones and
    within a file later sections override earlier ones.

    Parameters
    ----------
    file_path : Path
        Document to collect properties for

    Returns
    -------
    tuple of (dict, list)
        Lower-cased properties and the editorconfig files that were read

    """
    resolved = file_path.resolve()
    found: list[tuple[Path, configparser.ConfigParser]] = []
    current = resolved.parent
    while True:
        candidate = current / EDITORCONFIG_FILENAME
        if candidate.is_file():
            parser = _read_editorconfig(candidate)
            found.append((candidate, parser))
            if parser.get(_EDITORCONFIG_PREAMBLE, "root", fallback="").strip().lower() == "true":
                break
        parent = current.parent
        if parent == current:
            break
        current = parent

    properties: dict[str, str] = {}
    for config_file, parser in reversed(found):
        relative = resolved.relative_to(config_file.parent).as_posix()
        for section in parser.sections():
            if section == _EDITORCONFIG_PREAMBLE or not _editorconfig_section_matches(section, relative):
                continue
            for key, value in parser.items(section):
                properties[key] = value.strip().lower()
    return properties, [str(config_file) for config_file, _ in reversed(found)]


def editorconfig_to_options(properties: Mapping[str, str]) -> dict[str, Any]:
    """Map EditorConfig properties onto formatting options."""
    options: dict[str, Any] = {}
    end_of_line = properties.get("end_of_line")
    if end_of_line in ("lf", "crlf", "cr"):
        options["end_of_line"] = end_of_line
    return options


# =============================================================================
# Resolvers
# =============================================================================


class StaticConfigResolver:
    """Resolver returning the same options for every document.

    Parameters
    ----------
    options : FormatOptions, optional
        Options for every document. When omitted, the parser is inferred from
        each document's extension.
    ignored : iterable of str, optional
        Glob patterns; documents whose path or file name matches are skipped

    """

    def __init__(self, options: FormatOptions | None = None, ignored: Iterable[str] = ()) -> None:
        self.options = options
        self.ignored = tuple(ignored)

    def resolve(self, path: Path) -> ResolvedConfig:
        """Return the configured options, or a skip for ignored paths."""
        posix = Path(path).as_posix()
        name = Path(path).name
        if any(fnmatch.fnmatchcase(posix, pattern) or fnmatch.fnmatchcase(name, pattern) for pattern in self.ignored):
            return ResolvedConfig.skipped()
        options = self.options if self.options is not None else FormatOptions(parser=infer_parser(path))
        return ResolvedConfig.of(options)


class FileSystemConfigResolver:
    """Resolver reading ignore rules and configuration from the filesystem.

    Parameters
    ----------
    cwd : Path, optional
        Base directory for the ignore file (defaults to the current directory)
    overrides : Mapping, optional
        Options taking precedence over any discovered configuration
    ignore_path : Path, optional
        Ignore file to use instead of ``<cwd>/.mdauditignore``
    config_path : Path, optional
        Project configuration file to use instead of discovering one
    editorconfig : bool, default True
        Whether ``.editorconfig`` files are consulted

    """

    def __init__(
        self,
        cwd: Path | None = None,
        overrides: Mapping[str, Any] | None = None,
        ignore_path: Path | None = None,
        config_path: Path | None = None,
        editorconfig: bool = True,
    ) -> None:
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.overrides = dict(overrides or {})
        self.ignore_path = Path(ignore_path) if ignore_path is not None else self.cwd / IGNORE_FILENAME
        self.config_path = Path(config_path) if config_path is not None else None
        self.editorconfig = editorconfig

    def _ignore_rules(self) -> IgnoreRules:
        return IgnoreRules.from_file(self.ignore_path, base_dir=self.cwd)

    def resolve(self, path: Path) -> ResolvedConfig:
        """Resolve ignore state and merged options for ``path``.

        Raises
        ------
        ConfigError
            If a configuration file is malformed or sets an invalid option

        """
        file_path = path if path.is_absolute() else self.cwd / path
        if self._ignore_rules().is_ignored(file_path):
            logger.debug("%s is ignored by %s", path, self.ignore_path)
            return ResolvedConfig.skipped()

        sources: list[str] = []
        options = FormatOptions(parser=infer_parser(file_path))

        if self.editorconfig:
            properties, editorconfig_files = load_editorconfig(file_path)
            editor_options = editorconfig_to_options(properties)
            if editor_options:
                options = options.merged(editor_options, config_path=editorconfig_files[-1])
            sources.extend(editorconfig_files)

        config_path = self.config_path or find_config_in_parents(file_path.parent)
        if config_path is not None:
            options = options.merged(load_config_file(config_path), config_path=config_path)
            sources.append(str(config_path))

        if self.overrides:
            options = options.merged(self.overrides)

        logger.debug("Resolved options for %s: %s", path, options)
        return ResolvedConfig.of(options, sources)


__all__ = [
    "ConfigResolver",
    "FileSystemConfigResolver",
    "FormatOptions",
    "IgnoreRule",
    "IgnoreRules",
    "ResolvedConfig",
    "StaticConfigResolver",
    "editorconfig_to_options",
    "find_config_in_parents",
    "infer_parser",
    "load_config_file",
    "load_editorconfig",
]
