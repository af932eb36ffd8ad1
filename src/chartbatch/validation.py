from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import yaml
from jsonschema import Draft7Validator

from .asset_exporter import MissingAssetPolicy
from .categories import CategoryScheme
from .chart_compiler import ROTATIONS, TARGET_FORMATS
from .config import build_settings
from .errors import ConfigurationError
from .utils import expand_env


@dataclass(slots=True)
class ValidationIssue:
    """One schema or semantic problem found in a config file."""

    severity: str
    path: str
    message: str
    code: str
    line_number: Optional[int] = None
    fix_suggestion: Optional[str] = None


@dataclass(slots=True)
class ValidationReport:
    """Errors make a config unusable; warnings are reported but do not fail validation."""

    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


_OPTIONAL_STRING = {"type": ["string", "null"]}
_ASSET_ROOT = {"type": ["string", "null"]}

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "source_dir": _OPTIONAL_STRING,
        "output_dir": _OPTIONAL_STRING,
        "assets": {
            "type": "object",
            "properties": {
                "audio": _ASSET_ROOT,
                "image": _ASSET_ROOT,
                "video": _ASSET_ROOT,
            },
            "additionalProperties": False,
        },
        "category_scheme": {"type": "integer"},
        "compile": {
            "type": "object",
            "properties": {
                "target_format": {"type": ["string", "null"], "enum": [*TARGET_FORMATS, None]},
                "rotation": {"type": ["string", "null"], "enum": [*ROTATIONS, None]},
                "shift_tick": {"type": "integer"},
                "strict_decimal": {"type": "boolean"},
            },
            "additionalProperties": False,
        },
        "chart_extensions": {
            "oneOf": [
                {"type": "array", "items": {"type": "string", "minLength": 1}, "minItems": 1},
                {"type": "string", "minLength": 1},
            ]
        },
        "metadata_filename": {"type": "string", "minLength": 1},
        "ignore_incomplete": {"type": "boolean"},
        "id_as_folder_name": {"type": "boolean"},
        "log_json": {"type": "boolean"},
        "export_zip": {"type": "boolean"},
        "collections": {"type": "boolean"},
        "on_missing_asset": {"type": "string", "enum": [policy.value for policy in MissingAssetPolicy]},
    },
    "additionalProperties": False,
}

SECTION_DISPLAY_NAMES: Dict[str, str] = {
    "<root>": "Configuration",
    "source_dir": "Source Root",
    "output_dir": "Output Root",
    "assets": "Asset Roots",
    "category_scheme": "Category Scheme",
    "compile": "Compile Options",
    "chart_extensions": "Chart Extensions",
    "metadata_filename": "Metadata File",
    "on_missing_asset": "Missing Asset Policy",
    "settings": "Settings",
}


# Suggestion generators take (path, message, code) and return a hint or None
FixSuggestionGenerator = Callable[[str, str, str], Optional[str]]

_TYPE_HINTS = {
    "'boolean'": "true or false",
    "'integer'": "a whole number",
    "'object'": "a mapping of keys",
    "'string'": "a quoted string",
}


def _suggest_schema_fix(path: str, message: str, code: str) -> Optional[str]:
    if "unexpected" in message:
        return "Remove the unknown key or check it for typos"
    if "is not of type" in message:
        for token, hint in _TYPE_HINTS.items():
            if token in message:
                return f"Set this field to {hint}"
    if "is not one of" in message:
        return "Pick one of the listed values; names are case-sensitive in the config file"
    if "any of the given schemas" in message:
        return "Provide a suffix such as '.ma2' or a list of suffixes"
    return None


def _suggest_path_fix(path: str, message: str, code: str) -> Optional[str]:
    if path == "source_dir":
        return "Point source_dir at the folder that contains the 'music' directory"
    return "Create the directory or correct the path"


def _suggest_overlap_fix(path: str, message: str, code: str) -> Optional[str]:
    return "Choose an output_dir outside the source tree so compiled tracks are not rescanned"


def _suggest_load_config_fix(path: str, message: str, code: str) -> Optional[str]:
    lowered = message.lower()
    if "no such file" in lowered or "not found" in lowered:
        return "Check the configuration path; the file could not be opened"
    if "permission denied" in lowered:
        return "Make the configuration file readable by the current user"
    if "mapping" in lowered:
        return "The file must hold top-level keys such as source_dir and output_dir"
    return "Fix the YAML syntax (indentation, missing colons, unquoted special characters)"


def _suggest_settings_fix(path: str, message: str, code: str) -> Optional[str]:
    return "Correct the value named in the message; run with --help for the accepted choices"


def _suggest_scheme_fix(path: str, message: str, code: str) -> Optional[str]:
    return "Run 'chartbatch schemes' to list the valid category scheme indexes"


FIX_SUGGESTION_REGISTRY: Dict[str, FixSuggestionGenerator] = {
    "schema": _suggest_schema_fix,
    "path-missing": _suggest_path_fix,
    "output-overlap": _suggest_overlap_fix,
    "load-config": _suggest_load_config_fix,
    "settings": _suggest_settings_fix,
    "scheme-range": _suggest_scheme_fix,
}


def get_fix_suggestion(issue: ValidationIssue) -> Optional[str]:
    generator = FIX_SUGGESTION_REGISTRY.get(issue.code)
    return generator(issue.path, issue.message, issue.code) if generator else None


def _make_issue(
    severity: str,
    path: str,
    message: str,
    code: str,
    line_map: Optional[Dict[str, int]],
) -> ValidationIssue:
    issue = ValidationIssue(
        severity=severity,
        path=path,
        message=message,
        code=code,
        line_number=line_map.get(path) if line_map else None,
    )
    issue.fix_suggestion = get_fix_suggestion(issue)
    return issue


def _collect_node_lines(node: yaml.Node, prefix: str, line_map: Dict[str, int]) -> None:
    if isinstance(node, yaml.MappingNode):
        for key_node, value_node in node.value:
            key = str(key_node.value)
            path = f"{prefix}.{key}" if prefix else key
            line_map[path] = key_node.start_mark.line + 1
            _collect_node_lines(value_node, path, line_map)
    elif isinstance(node, yaml.SequenceNode):
        for index, item in enumerate(node.value):
            path = f"{prefix}[{index}]"
            line_map[path] = item.start_mark.line + 1
            _collect_node_lines(item, path, line_map)


def extract_yaml_line_numbers(yaml_content: str) -> Dict[str, int]:
    """Map dotted key paths to 1-based line numbers.

    Example:
        >>> extract_yaml_line_numbers("compile:\\n  rotation: Left\\n")["compile.rotation"]
        2
    """
    line_map: Dict[str, int] = {}
    try:
        root = yaml.compose(yaml_content, Loader=yaml.SafeLoader)
    except yaml.YAMLError:
        return line_map
    if root is not None:
        _collect_node_lines(root, "", line_map)
    return line_map


def _format_jsonschema_path(path: Sequence[Any]) -> str:
    """Render a jsonschema path as ``compile.rotation`` or ``chart_extensions[1]``."""
    rendered = ""
    for part in path:
        if isinstance(part, int):
            rendered += f"[{part}]"
        else:
            rendered += f".{part}" if rendered else str(part)
    return rendered or "<root>"


def _schema_error_path(error: Any) -> str:
    path = _format_jsonschema_path(error.absolute_path)
    # Unknown keys report against their parent; point at the key itself
    if error.validator == "additionalProperties":
        match = re.search(r"\('([^']+)' was unexpected\)", error.message)
        if match:
            key = match.group(1)
            return key if path == "<root>" else f"{path}.{key}"
    return path


def validate_config_data(
    data: Dict[str, Any],
    line_map: Optional[Dict[str, int]] = None,
) -> ValidationReport:
    """Validate configuration data against the schema and semantic rules.

    Args:
        data: Parsed configuration mapping
        line_map: Optional mapping from config paths to line numbers in the source file

    Returns:
        ValidationReport containing any errors or warnings found
    """
    report = ValidationReport()
    validator = Draft7Validator(CONFIG_SCHEMA)

    for error in sorted(validator.iter_errors(data), key=lambda exc: list(map(str, exc.path))):
        report.errors.append(_make_issue("error", _schema_error_path(error), error.message, "schema", line_map))

    if report.is_valid:
        _validate_semantics(data, report, line_map)
    return report


def _resolve(raw: str) -> Path:
    return Path(raw).expanduser()


def _validate_semantics(
    data: Dict[str, Any],
    report: ValidationReport,
    line_map: Optional[Dict[str, int]] = None,
) -> None:
    try:
        build_settings(data)
    except ConfigurationError as exc:
        report.errors.append(_make_issue("error", "<root>", str(exc), "settings", line_map))
        return

    scheme = data.get("category_scheme")
    if scheme is not None and scheme not in {int(member) for member in CategoryScheme}:
        report.warnings.append(
            _make_issue(
                "warning",
                "category_scheme",
                f"Category scheme {scheme} is out of range; {CategoryScheme.GENRE.display_name} is used instead",
                "scheme-range",
                line_map,
            )
        )

    source_raw = data.get("source_dir")
    output_raw = data.get("output_dir")
    source_path = _resolve(source_raw) if isinstance(source_raw, str) and source_raw.strip() else None
    output_path = _resolve(output_raw) if isinstance(output_raw, str) and output_raw.strip() else None

    if source_path is not None:
        if not source_path.is_dir():
            report.warnings.append(
                _make_issue("warning", "source_dir", f"Source root does not exist: {source_path}", "path-missing", line_map)
            )
        elif not (source_path / "music").is_dir():
            report.warnings.append(
                _make_issue(
                    "warning",
                    "source_dir",
                    f"Source root has no 'music' folder: {source_path}",
                    "path-missing",
                    line_map,
                )
            )

    if source_path is not None and output_path is not None:
        music_dir = (source_path / "music").resolve()
        resolved_output = output_path.resolve()
        if resolved_output == music_dir or music_dir in resolved_output.parents:
            report.errors.append(
                _make_issue(
                    "error",
                    "output_dir",
                    f"Output root {output_path} lies inside the track source folder",
                    "output-overlap",
                    line_map,
                )
            )

    assets = data.get("assets") or {}
    for kind, raw in assets.items():
        if isinstance(raw, str) and raw.strip():
            asset_path = _resolve(raw)
            if not asset_path.is_dir():
                report.warnings.append(
                    _make_issue(
                        "warning",
                        f"assets.{kind}",
                        f"Asset root does not exist: {asset_path}",
                        "path-missing",
                        line_map,
                    )
                )


def validate_config_file(path: Path) -> Tuple[ValidationReport, Optional[Dict[str, Any]]]:
    """Load and validate a YAML configuration file.

    Load failures are reported as a ``load-config`` issue rather than raised.
    """
    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError) as exc:
        report = ValidationReport()
        report.errors.append(_make_issue("error", "<root>", f"Failed to load {path}: {exc}", "load-config", None))
        return report, None

    if not isinstance(data, dict):
        report = ValidationReport()
        report.errors.append(
            _make_issue("error", "<root>", f"Configuration root must be a mapping in {path}", "load-config", None)
        )
        return report, None

    data = expand_env(data)
    report = validate_config_data(data, extract_yaml_line_numbers(content))
    return report, data


def get_section_display_name(section: str) -> str:
    if section in SECTION_DISPLAY_NAMES:
        return SECTION_DISPLAY_NAMES[section]
    return section.replace("_", " ").title()


def group_validation_issues(
    issues: List[ValidationIssue],
) -> Dict[str, Dict[str, List[ValidationIssue]]]:
    """Bucket issues by top-level key, then by second-level key.

    ``compile.rotation`` lands under ``compile`` -> ``rotation``; top-level
    keys such as ``source_dir`` group under themselves.
    """
    grouped: Dict[str, Dict[str, List[ValidationIssue]]] = {}
    for issue in issues:
        section, _, remainder = issue.path.partition(".")
        section = section.split("[", 1)[0] or "<root>"
        key = remainder.split(".", 1)[0] if remainder else section
        grouped.setdefault(section, {}).setdefault(key, []).append(issue)
    return grouped


__all__ = [
    "CONFIG_SCHEMA",
    "FIX_SUGGESTION_REGISTRY",
    "ValidationIssue",
    "ValidationReport",
    "extract_yaml_line_numbers",
    "get_fix_suggestion",
    "get_section_display_name",
    "group_validation_issues",
    "validate_config_data",
    "validate_config_file",
]
