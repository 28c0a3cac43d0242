"""Read a single canonical value (usually a path) back from command output."""

from __future__ import annotations

import json
import os
import re
from collections.abc import Mapping

from pkgmanagers.errors import ExtractionError, UnknownExtractTypeError
from pkgmanagers.extractor.rules import parse_extract_rule
from pkgmanagers.models import (
    ExtractKind,
    ExtractRule,
    JsonArrayExtract,
    JsonFieldExtract,
    LinePrefixExtract,
    RawExtract,
    RegexExtract,
    TemplateExtract,
)

PACKAGE_PLACEHOLDER = "{package}"


def extract_path(
    output: str,
    rule: ExtractRule | Mapping[str, object] | None,
    package: str = "",
) -> str:
    """Apply ``rule`` to ``output`` and return the extracted value.

    Args:
        output: Raw stdout of the executed command.
        rule: A rule variant, an ``extract:`` mapping, or None for raw.
        package: Package name, used by json_array matching and templates.

    Raises:
        ExtractionError: If the output does not fit the rule.
        UnknownExtractTypeError: If a mapping names an unknown type.
    """
    if rule is None:
        return output.strip()
    if isinstance(rule, Mapping):
        rule = parse_extract_rule(rule)

    match rule:
        case RawExtract():
            result = output.strip()
        case JsonFieldExtract(field=name):
            result = _json_field(output, name)
        case LinePrefixExtract(prefix=prefix):
            result = _line_prefix(output, prefix)
        case RegexExtract(pattern=pattern):
            result = _regex(output, pattern)
        case JsonArrayExtract():
            result = _json_array(output, rule, package)
        case TemplateExtract(pattern=pattern):
            result = _template(pattern, package)
        case _:
            raise UnknownExtractTypeError(str(getattr(rule, "kind", type(rule).__name__)))

    if rule.strip_filename:
        result = strip_filename(result)
    return result


def strip_filename(path: str) -> str:
    """Drop exactly one trailing path component ("." when nothing remains)."""
    return os.path.dirname(path) or "."


# ─── Strategies ───────────────────────────────────────────────


def _json_field(output: str, name: str) -> str:
    if not name:
        raise ExtractionError(ExtractKind.JSON, "json extraction requires field name")
    data = _load_object(output, ExtractKind.JSON)
    if name not in data:
        raise ExtractionError(ExtractKind.JSON, f"field {name!r} not found in JSON")
    value = data[name]
    if not isinstance(value, str):
        raise ExtractionError(ExtractKind.JSON, f"field {name!r} is not a string")
    return value


def _line_prefix(output: str, prefix: str) -> str:
    if not prefix:
        raise ExtractionError(ExtractKind.LINE_PREFIX, "line_prefix extraction requires prefix")
    for line in output.split("\n"):
        if line.startswith(prefix):
            return line[len(prefix) :].strip()
    raise ExtractionError(ExtractKind.LINE_PREFIX, f"no line found with prefix {prefix!r}")


def _regex(output: str, pattern: str) -> str:
    if not pattern:
        raise ExtractionError(ExtractKind.REGEX, "regex extraction requires pattern")
    try:
        compiled = re.compile(pattern)
    except re.error as exc:
        raise ExtractionError(ExtractKind.REGEX, f"invalid regex pattern: {exc}") from exc
    found = compiled.search(output)
    if found is None or compiled.groups < 1 or found.group(1) is None:
        raise ExtractionError(
            ExtractKind.REGEX, "pattern did not match or no capture group found"
        )
    return found.group(1).strip()


def _json_array(output: str, rule: JsonArrayExtract, package: str) -> str:
    if not (rule.array_field and rule.match_field and rule.extract_field):
        raise ExtractionError(
            ExtractKind.JSON_ARRAY,
            "json_array extraction requires array_field, match_field, and extract_field",
        )
    data = _load_object(output, ExtractKind.JSON_ARRAY)
    items = data.get(rule.array_field)
    if not isinstance(items, list):
        raise ExtractionError(
            ExtractKind.JSON_ARRAY, f"field {rule.array_field!r} is not an array"
        )

    for item in items:
        if not isinstance(item, dict) or item.get(rule.match_field) != package:
            continue
        value = item.get(rule.extract_field)
        if not isinstance(value, str):
            raise ExtractionError(
                ExtractKind.JSON_ARRAY,
                f"field {rule.extract_field!r} is not a string in matched element",
            )
        return value.strip()

    raise ExtractionError(
        ExtractKind.JSON_ARRAY, f"no element found with {rule.match_field}={package!r}"
    )


def _template(pattern: str, package: str) -> str:
    if not pattern:
        raise ExtractionError(ExtractKind.TEMPLATE, "template extraction requires pattern")
    if not package:
        raise ExtractionError(ExtractKind.TEMPLATE, "template extraction requires package name")
    return pattern.replace(PACKAGE_PLACEHOLDER, package)


def _load_object(output: str, kind: ExtractKind) -> dict:
    try:
        data = json.loads(output)
    except json.JSONDecodeError as exc:
        raise ExtractionError(kind, f"failed to parse JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ExtractionError(kind, f"expected a JSON object, got {type(data).__name__}")
    return data
