"""
Keyword and file-target lookup tables.

Every keyword-driven decision in the pipeline reads one of these tables,
so the mapping from free text to tags and files is data, not control flow.
Tables are ordered: iteration order is output order.
"""

import re

# =============================================================================
# ANALYSIS
# =============================================================================

# Tag -> trigger keywords. "field" triggers both ui and database.
AREA_KEYWORDS: dict[str, tuple[str, ...]] = {
    "ui": ("ui", "layout", "button", "field", "align", "comment"),
    "database": ("database", "schema", "field", "column", "table"),
    "api": ("api", "endpoint", "route"),
    "contractor": ("contractor", "airwallex"),
}

# Tags that produce a requirement of the same name
REQUIREMENT_AREAS: tuple[str, ...] = ("ui", "database", "api")

# First match wins; no match means "all"
ENVIRONMENT_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("remote", ("production", "supabase")),
    ("local", ("local", "docker")),
)

# (trigger, qualifiers, question): ambiguous when trigger is present
# and none of the qualifiers are
AMBIGUITY_RULES: tuple[tuple[str, tuple[str, ...], str], ...] = (
    ("fix", ("what",), "What specifically needs to be fixed?"),
    ("align", ("with",), "What should the alignment match?"),
    ("change", ("to",), "What should it be changed to?"),
)

SIMPLE_WORD_LIMIT = 10
MODERATE_WORD_LIMIT = 30

# =============================================================================
# DEVELOPER FILE TARGETS
# =============================================================================

CONTRACTORS_PAGE = "src/app/entities/contractors/page.tsx"
CONTRACTOR_FORM = "src/components/contractor-form.tsx"
CONTRACTOR_TYPES = "src/types/contractor.ts"
SCHEMA_FILE = "prisma/schema.prisma"

# Model/interface that schema and type field additions land in
SCHEMA_MODEL = "Contractor"
TYPE_INTERFACE = "Contractor"

UI_FILE_TARGETS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("contractor", (CONTRACTORS_PAGE, CONTRACTOR_FORM)),
    ("comment", (CONTRACTORS_PAGE,)),
)

API_FILE_TARGETS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "contractor",
        (
            "src/app/api/contractors/[id]/route.ts",
            "src/app/api/contractors/route.ts",
        ),
    ),
    ("airwallex", ("src/app/api/airwallex-contractors/sync/route.ts",)),
)

TYPE_FILE_TARGETS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("type", (CONTRACTOR_TYPES,)),
    ("interface", (CONTRACTOR_TYPES,)),
)

# Failure-reason keyword -> fix strategy. Order is strategy priority.
FIX_STRATEGY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("layout", ("misaligned", "alignment", "aligned", "offset")),
    ("code", ("undefined",)),
    ("schema", ("schema", "prisma", "validation")),
    ("api", ("status", "endpoint", "response", "parseable", "unparseable")),
)

# =============================================================================
# MATCHING
# =============================================================================

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


def tokenize(text: str) -> list[str]:
    """Lowercase and split on anything that is not a letter or digit."""
    return [t for t in _TOKEN_SPLIT.split(text.lower()) if t]


def has_keyword(tokens: set[str] | list[str], keyword: str) -> bool:
    """True if keyword, or keyword plus a plural "s", is among tokens."""
    return keyword in tokens or f"{keyword}s" in tokens


def has_any(tokens: set[str] | list[str], keywords: tuple[str, ...]) -> bool:
    return any(has_keyword(tokens, k) for k in keywords)


def lookup_files(
    tokens: set[str] | list[str],
    table: tuple[tuple[str, tuple[str, ...]], ...],
) -> list[str]:
    """Collect the files of every matching table row, deduplicated in table order."""
    files: list[str] = []
    for keyword, targets in table:
        if has_keyword(tokens, keyword):
            for target in targets:
                if target not in files:
                    files.append(target)
    return files
