"""Build extract rule variants from definition documents."""

from __future__ import annotations

from collections.abc import Mapping

from pkgmanagers.errors import UnknownExtractTypeError
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


def parse_extract_rule(data: Mapping[str, object]) -> ExtractRule:
    """Turn an ``extract:`` mapping into its rule variant.

    Missing parameters are kept as empty strings; the extractor reports
    them when the rule is applied, matching how a malformed rule behaves
    at run time rather than at load time.

    Raises:
        UnknownExtractTypeError: If ``type`` names no known strategy.
    """
    raw_type = str(data.get("type", "") or ExtractKind.RAW)
    strip = bool(data.get("strip_filename", False))

    try:
        kind = ExtractKind(raw_type)
    except ValueError:
        raise UnknownExtractTypeError(raw_type) from None

    def param(name: str) -> str:
        return str(data.get(name, "") or "")

    match kind:
        case ExtractKind.RAW:
            return RawExtract(strip_filename=strip)
        case ExtractKind.JSON:
            return JsonFieldExtract(field=param("field"), strip_filename=strip)
        case ExtractKind.LINE_PREFIX:
            return LinePrefixExtract(prefix=param("prefix"), strip_filename=strip)
        case ExtractKind.REGEX:
            return RegexExtract(pattern=param("pattern"), strip_filename=strip)
        case ExtractKind.JSON_ARRAY:
            return JsonArrayExtract(
                array_field=param("array_field"),
                match_field=param("match_field"),
                extract_field=param("extract_field"),
                strip_filename=strip,
            )
        case ExtractKind.TEMPLATE:
            return TemplateExtract(pattern=param("pattern"), strip_filename=strip)
