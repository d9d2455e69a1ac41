"""
Textual file transformations applied by the Developer worker.

Every transformation is a pure function (content, description) -> content
and is idempotent: applied to its own output it returns that output
unchanged. Which transformation runs on which file is decided by the
first-match RULES table, or by a fix strategy for fix requirements.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from changeguard.domain.keywords import (
    SCHEMA_MODEL,
    TYPE_INTERFACE,
    has_any,
    has_keyword,
)

Transformation = Callable[[str, str], str]

# =============================================================================
# UI LAYOUT
# =============================================================================

_FLEX_WRAPPED_TEXTAREA = re.compile(
    r'<div className="flex">\s*(<textarea\b[^>]*?(?:/>|>.*?</textarea>))\s*</div>',
    re.DOTALL,
)

_TABLE_ROW = """<table className="w-full text-sm">
  <tbody>
    <tr>
      <td className="py-1 font-semibold text-gray-600 w-32"></td>
      <td className="py-1 px-4">{textarea}</td>
    </tr>
  </tbody>
</table>"""


def align_comment_field(content: str, description: str = "") -> str:
    """Move a flex-wrapped comment textarea into the two-column record row layout."""
    return _FLEX_WRAPPED_TEXTAREA.sub(
        lambda m: _TABLE_ROW.format(textarea=m.group(1)), content
    )


_TEXTAREA_TAG = re.compile(r"<textarea\b[^>]*>")
_CLASS_ATTR = re.compile(r'className="([^"]*)"')
_OFFSET_CLASS = re.compile(r"^-?m[lrx]-")


def _drop_offset_classes(match: re.Match[str]) -> str:
    classes = match.group(1).split()
    kept = [c for c in classes if not _OFFSET_CLASS.match(c)]
    if len(kept) == len(classes):
        return match.group(0)
    return f'className="{" ".join(kept)}"'


def snap_alignment(content: str, description: str = "") -> str:
    """Strip horizontal offset utilities (ml-*, mr-*, mx-*) from textarea tags."""
    return _TEXTAREA_TAG.sub(
        lambda tag: _CLASS_ATTR.sub(_drop_offset_classes, tag.group(0)), content
    )


_CELL_PADDING = re.compile(r'<td className="py-1 px-(?!4")\d+">')


def normalize_cell_padding(content: str, description: str = "") -> str:
    """Normalize record-row value cells to px-4."""
    return _CELL_PADDING.sub('<td className="py-1 px-4">', content)


# =============================================================================
# FIELD ADDITIONS
# =============================================================================

_FIELD_NAME_PATTERNS = (
    re.compile(r"\bfield\s+(?:named|called)\s+[`'\"]?([A-Za-z_]\w*)", re.IGNORECASE),
    re.compile(
        r"\badd\s+(?:(?:an?|the|new)\s+)*[`'\"]?([A-Za-z_]\w*)[`'\"]?\s+fields?\b",
        re.IGNORECASE,
    ),
)
_NOT_FIELD_NAMES = {"a", "an", "the", "new", "field", "fields"}


def extract_field_name(description: str) -> str | None:
    """Find the field name in phrases like "add a notes field" or "field named taxId"."""
    for pattern in _FIELD_NAME_PATTERNS:
        match = pattern.search(description)
        if match and match.group(1).lower() not in _NOT_FIELD_NAMES:
            return match.group(1)
    return None


def _block_end(content: str, open_brace: int) -> int:
    """Index of the brace closing the block opened at open_brace, or -1."""
    depth = 0
    for index in range(open_brace, len(content)):
        if content[index] == "{":
            depth += 1
        elif content[index] == "}":
            depth -= 1
            if depth == 0:
                return index
    return -1


def _insert_member(
    content: str, header: re.Pattern[str], present: re.Pattern[str], line: str
) -> str:
    match = header.search(content)
    if not match:
        return content
    close = _block_end(content, match.end() - 1)
    if close == -1 or present.search(content[match.end() : close]):
        return content
    line_start = content.rfind("\n", 0, close) + 1
    if line_start <= match.start():
        return content  # Single-line block
    return content[:line_start] + line + "\n" + content[line_start:]


def add_schema_field(content: str, description: str = "") -> str:
    """Add an optional String field named in the description to the schema model."""
    name = extract_field_name(description)
    if name is None:
        return content
    return _insert_member(
        content,
        re.compile(rf"^model\s+{SCHEMA_MODEL}\s*\{{", re.MULTILINE),
        re.compile(rf"^\s*{re.escape(name)}\s", re.MULTILINE),
        f"  {name} String?",
    )


def add_type_field(content: str, description: str = "") -> str:
    """Add an optional string property named in the description to the type interface."""
    name = extract_field_name(description)
    if name is None:
        return content
    return _insert_member(
        content,
        re.compile(rf"^(?:export\s+)?interface\s+{TYPE_INTERFACE}\s*\{{", re.MULTILINE),
        re.compile(rf"^\s*{re.escape(name)}\??\s*:", re.MULTILINE),
        f"  {name}?: string;",
    )


# =============================================================================
# CODE FIXES
# =============================================================================

_BARE_LET = re.compile(r"\blet\s+([A-Za-z_$][\w$]*)\s*;")


def initialize_declarations(content: str, description: str = "") -> str:
    """Rewrite bare `let x;` declarations to `let x = null;`."""
    return _BARE_LET.sub(r"let \1 = null;", content)


_RAW_JSON_RESPONSE = re.compile(
    r"new Response\(\s*JSON\.stringify\(((?:[^()]|\([^()]*\))*)\)\s*\)"
)
_NEXT_RESPONSE_IMPORT = re.compile(
    r"import\s*\{[^}]*\bNextResponse\b[^}]*\}\s*from\s*['\"]next/server['\"]"
)


def json_response(content: str, description: str = "") -> str:
    """Rewrite `new Response(JSON.stringify(x))` to `NextResponse.json(x)`."""
    updated, count = _RAW_JSON_RESPONSE.subn(r"NextResponse.json(\1)", content)
    if count and not _NEXT_RESPONSE_IMPORT.search(updated):
        updated = 'import { NextResponse } from "next/server";\n' + updated
    return updated


# =============================================================================
# RULE TABLE
# =============================================================================


@dataclass(frozen=True)
class TransformationRule:
    """When to apply one transformation."""

    name: str
    transform: Transformation
    suffixes: tuple[str, ...]
    all_of: tuple[str, ...] = ()
    any_of: tuple[str, ...] = ()

    def applies_to(self, file: str) -> bool:
        return file.endswith(self.suffixes)

    def matches(self, tokens: set[str], file: str) -> bool:
        if not self.applies_to(file):
            return False
        if not all(has_keyword(tokens, k) for k in self.all_of):
            return False
        return not self.any_of or has_any(tokens, self.any_of)


ALIGN_COMMENT = TransformationRule(
    "align_comment_field", align_comment_field, (".tsx",), all_of=("comment", "align")
)
SNAP_ALIGNMENT = TransformationRule(
    "snap_alignment",
    snap_alignment,
    (".tsx",),
    any_of=("misaligned", "alignment", "offset"),
)
CELL_PADDING = TransformationRule(
    "normalize_cell_padding",
    normalize_cell_padding,
    (".tsx",),
    any_of=("layout", "align"),
)
SCHEMA_FIELD = TransformationRule(
    "add_schema_field", add_schema_field, (".prisma",), all_of=("add", "field")
)
JSON_RESPONSE = TransformationRule(
    "json_response", json_response, ("route.ts",), any_of=("api", "response", "json")
)
TYPE_FIELD = TransformationRule(
    "add_type_field", add_type_field, (".ts",), all_of=("add", "field")
)
INITIALIZE = TransformationRule(
    "initialize_declarations",
    initialize_declarations,
    (".ts", ".tsx"),
    any_of=("undefined",),
)

# First match wins. Route files try json_response before add_type_field.
RULES: tuple[TransformationRule, ...] = (
    ALIGN_COMMENT,
    SNAP_ALIGNMENT,
    CELL_PADDING,
    SCHEMA_FIELD,
    JSON_RESPONSE,
    TYPE_FIELD,
    INITIALIZE,
)

# Fix strategy -> rules applied in order, matched on file suffix only
STRATEGY_RULES: dict[str, tuple[TransformationRule, ...]] = {
    "layout": (SNAP_ALIGNMENT, CELL_PADDING),
    "code": (INITIALIZE,),
    "schema": (SCHEMA_FIELD, TYPE_FIELD),
    "api": (JSON_RESPONSE,),
}


def select_rule(tokens: set[str], file: str) -> TransformationRule | None:
    """First rule in RULES matching the description tokens and the file."""
    for rule in RULES:
        if rule.matches(tokens, file):
            return rule
    return None


def strategy_rules(strategies: list[str], file: str) -> list[TransformationRule]:
    """Rules for the given fix strategies that apply to the file, deduplicated."""
    rules: list[TransformationRule] = []
    for strategy in strategies:
        for rule in STRATEGY_RULES.get(strategy, ()):
            if rule.applies_to(file) and rule not in rules:
                rules.append(rule)
    return rules
