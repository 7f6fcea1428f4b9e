"""README parser for usage examples and installation snippets.

Best-effort heuristics over untrusted third-party Markdown. The public entry
points never raise on bad input: a README the parser does not understand simply
yields fewer examples (or an empty string / empty instructions).

``parse_usage_examples`` pipeline:

  clean_content
    → scan_sections        (headed sections; only example-bearing ones buffered)
    → extract_code_blocks  (fenced blocks + declared language tag)
    → is_relevant_code_block
    → detect_language      (untagged blocks only)
    → extract_block_description
    → deduplicate_examples

The relevance filter and the language detector are ordered rule tables,
evaluated first-match-wins. Order matters: e.g. a 25-character bare URL is
rejected as noise before the untagged-length fallback is reached.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from podreadme.models.readme import InstallationInstructions, UsageExample

log = structlog.get_logger()

GENERAL_USAGE_TITLE = "General Usage"

# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------

BADGE_HOSTS: tuple[str, ...] = (
    "shields.io",
    "badge.fury.io",
    "travis-ci.org",
    "travis-ci.com",
    "codecov.io",
)

_LINKED_IMAGE_RE = re.compile(r"\[!\[[^\]\n]*\]\([^)\n]*\)\]\([^)\n]*\)")
_BADGE_IMAGE_RE = re.compile(
    r"!\[[^\]\n]*\]\([^)\n]*(?:"
    + "|".join(re.escape(host) for host in BADGE_HOSTS)
    + r")[^)\n]*\)"
)
_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_BLANK_RUN_RE = re.compile(r"\n\s*\n\s*\n")


def clean_content(text: str) -> str:
    """Strip badges and HTML comments, collapse blank-line runs, trim.

    Returns ``""`` for non-string or empty input. Idempotent.
    """
    if not isinstance(text, str) or not text:
        return ""

    cleaned = text
    # Every pass only removes characters, so this reaches a fixed point.
    # Repeating handles removals that expose a new match, e.g. a comment
    # sitting inside a badge link.
    while True:
        previous = cleaned
        cleaned = _LINKED_IMAGE_RE.sub("", cleaned)
        cleaned = _BADGE_IMAGE_RE.sub("", cleaned)
        cleaned = _HTML_COMMENT_RE.sub("", cleaned)
        cleaned = _BLANK_RUN_RE.sub("\n\n", cleaned)
        cleaned = cleaned.strip()
        if cleaned == previous:
            return cleaned


# ---------------------------------------------------------------------------
# Section scanner
# ---------------------------------------------------------------------------

_HEADING_RE = re.compile(r"^#{1,4}\s")
_HEADING_MARKER_RE = re.compile(r"^#{1,4}\s*")

# Matched against the full heading line, in order. Any hit makes the section
# example-bearing.
EXAMPLE_SECTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^#{1,4}\s*(usage|how to use|getting started|quick start|example|examples)", re.I),
    re.compile(r"^#{1,4}\s*(installation|install)", re.I),
    re.compile(r"^#{1,4}\s*(implementation|integration)", re.I),
    re.compile(r"^#{1,4}\s*(setup|configuration)", re.I),
)


@dataclass
class Section:
    title: str
    is_example_bearing: bool
    lines: list[str] = field(default_factory=list)


def is_example_heading(line: str) -> bool:
    return any(pattern.search(line) for pattern in EXAMPLE_SECTION_PATTERNS)


def scan_sections(text: str) -> list[UsageExample]:
    """Walk ``text`` line by line and extract examples from example-bearing sections.

    Lines of sections that are not example-bearing are dropped as they are
    read; only the current relevant section is ever buffered.
    """
    examples: list[UsageExample] = []
    section = Section(title="", is_example_bearing=False)

    for line in text.split("\n"):
        if _HEADING_RE.match(line):
            examples.extend(_flush_section(section))
            section = Section(
                title=_HEADING_MARKER_RE.sub("", line, count=1).strip(),
                is_example_bearing=is_example_heading(line),
            )
        elif section.is_example_bearing:
            section.lines.append(line)

    examples.extend(_flush_section(section))
    return examples


def _flush_section(section: Section) -> list[UsageExample]:
    if not section.is_example_bearing or not section.lines:
        return []
    return extract_examples(section.title, "\n".join(section.lines))


def extract_examples(title: str, text: str) -> list[UsageExample]:
    """Turn the relevant fenced blocks of one section into ``UsageExample``s.

    A single block takes the section title as-is; several blocks are numbered
    by their position in the section (``"Usage 1"``, ``"Usage 2"``, ...).
    """
    blocks = extract_code_blocks(text)
    examples: list[UsageExample] = []

    for index, block in enumerate(blocks, start=1):
        if not is_relevant_code_block(block.body, block.language):
            continue
        examples.append(
            UsageExample(
                title=title if len(blocks) == 1 else f"{title} {index}",
                description=extract_block_description(text, block.start_offset),
                code=block.body.strip(),
                language=block.language or detect_language(block.body),
            )
        )

    return examples


# ---------------------------------------------------------------------------
# Code block extractor
# ---------------------------------------------------------------------------

# Opening fence, optional language token, body up to the first closing fence.
_CODE_BLOCK_RE = re.compile(r"```([\w+#-]+)?\s*\n([\s\S]*?)\n```")


@dataclass(frozen=True)
class CodeBlock:
    language: str  # "" when the fence carries no tag
    body: str
    start_offset: int  # Offset of the opening fence within the section text


def extract_code_blocks(text: str) -> list[CodeBlock]:
    return [
        CodeBlock(
            language=match.group(1) or "",
            body=match.group(2),
            start_offset=match.start(),
        )
        for match in _CODE_BLOCK_RE.finditer(text)
    ]


# ---------------------------------------------------------------------------
# Relevance filter
# ---------------------------------------------------------------------------

MIN_CODE_LENGTH = 10
UNTAGGED_FALLBACK_MIN_LENGTH = 20

# Checked against the stripped body.
NOISE_RULES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("document_metadata", re.compile(r"^(version|changelog|license|copyright)", re.I)),
    ("version_number", re.compile(r"^\d+\.\d+\.\d+")),
    ("bare_url", re.compile(r"^https?://")),
    ("key_value", re.compile(r"^[\w\s]*:[\w\s]*$")),
    ("comment_only", re.compile(r"^\s*#\s*\w+\s*$")),
)

RELEVANT_LANGUAGES: frozenset[str] = frozenset(
    {"swift", "objc", "objective-c", "ruby", "bash", "shell", "json", "plist"}
)

ECOSYSTEM_KEYWORD_RULES: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.I)
    for pattern in (
        r"import\s+\w+",
        r"class\s+\w+",
        r"func\s+\w+",
        r"pod\s+['\"]",
        r"CocoaPods",
        r"Podfile",
        r"Podspec",
        r"UIKit",
        r"Foundation",
        r"SwiftUI",
        r"@IBOutlet",
        r"@IBAction",
        r"@objc",
        r"viewDidLoad",
        r"override\s+func",
    )
)


def _too_short(code: str, language: str) -> bool:
    return len(code.strip()) < MIN_CODE_LENGTH


def _is_noise(code: str, language: str) -> bool:
    stripped = code.strip()
    return any(pattern.search(stripped) for _, pattern in NOISE_RULES)


def _has_relevant_language(code: str, language: str) -> bool:
    return bool(language) and language.lower() in RELEVANT_LANGUAGES


def _has_ecosystem_keyword(code: str, language: str) -> bool:
    return any(pattern.search(code) for pattern in ECOSYSTEM_KEYWORD_RULES)


def _untagged_and_long_enough(code: str, language: str) -> bool:
    return not language and len(code) > UNTAGGED_FALLBACK_MIN_LENGTH


# (name, predicate, verdict): the first predicate that holds decides.
RELEVANCE_RULES: tuple[tuple[str, Callable[[str, str], bool], bool], ...] = (
    ("too_short", _too_short, False),
    ("noise", _is_noise, False),
    ("relevant_language", _has_relevant_language, True),
    ("ecosystem_keyword", _has_ecosystem_keyword, True),
    ("untagged_fallback", _untagged_and_long_enough, True),
)


def match_relevance_rule(code: str, language: str) -> tuple[str, bool] | None:
    """Return ``(rule_name, verdict)`` of the first matching rule, or ``None``."""
    for name, predicate, verdict in RELEVANCE_RULES:
        if predicate(code, language):
            return name, verdict
    return None


def is_relevant_code_block(code: str, language: str) -> bool:
    matched = match_relevance_rule(code, language)
    return matched is not None and matched[1]


# ---------------------------------------------------------------------------
# Language detector
# ---------------------------------------------------------------------------

_JSON_OBJECT_RE = re.compile(r"^\s*\{[\s\S]*\}\s*$")
_JSON_KEY_RE = re.compile(r"[\"'][\w-]+[\"']\s*:")


def _looks_like_json(code: str) -> bool:
    return bool(_JSON_OBJECT_RE.search(code.strip())) and bool(_JSON_KEY_RE.search(code))


LANGUAGE_RULES: tuple[tuple[Callable[[str], object], str], ...] = (
    (re.compile(r"^\s*pod\s+['\"]").search, "ruby"),
    (re.compile(r"import\s+\w+|func\s+\w+|class\s+\w+.*\{|var\s+\w+|let\s+\w+").search, "swift"),
    (re.compile(r"@interface|@implementation|@property|\*\w+|#import").search, "objective-c"),
    (re.compile(r"\$\s*\w+|sudo|brew|curl|git\s+clone").search, "bash"),
    (_looks_like_json, "json"),
)

FALLBACK_LANGUAGE = "text"


def detect_language(code: str) -> str:
    """Guess the language of an untagged block. Falls back to ``"text"``."""
    for predicate, language in LANGUAGE_RULES:
        if predicate(code):
            return language
    return FALLBACK_LANGUAGE


# ---------------------------------------------------------------------------
# Description extractor
# ---------------------------------------------------------------------------

_ANY_HEADING_RE = re.compile(r"^#{1,6}\s")
MIN_DESCRIPTION_LENGTH = 10


def extract_block_description(text: str, block_offset: int) -> str | None:
    """Return the nearest prose line above ``block_offset``, stopping at a heading."""
    for line in reversed(text[:block_offset].split("\n")):
        stripped = line.strip()
        if _ANY_HEADING_RE.match(stripped):
            return None
        if len(stripped) > MIN_DESCRIPTION_LENGTH:
            return stripped
    return None


# ---------------------------------------------------------------------------
# Deduplicator
# ---------------------------------------------------------------------------

_WHITESPACE_RE = re.compile(r"\s+")


def example_fingerprint(example: UsageExample) -> str:
    normalized = _WHITESPACE_RE.sub(" ", example.code).strip().lower()
    return f"{example.language}:{normalized}"


def deduplicate_examples(examples: list[UsageExample]) -> list[UsageExample]:
    """Keep the first example per fingerprint, preserving order."""
    seen: set[str] = set()
    unique: list[UsageExample] = []
    for example in examples:
        key = example_fingerprint(example)
        if key in seen:
            continue
        seen.add(key)
        unique.append(example)
    return unique


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def parse_usage_examples(document: str) -> list[UsageExample]:
    """Extract de-duplicated usage examples from a README.

    Falls back to scanning the whole document as ``"General Usage"`` when no
    example-bearing section yields anything. Returns ``[]`` for non-string or
    empty input.
    """
    if not isinstance(document, str) or not document:
        log.debug(
            "readme_parse_skipped", reason="invalid_input", input_type=type(document).__name__
        )
        return []

    text = clean_content(document)
    examples = scan_sections(text)

    if not examples:
        log.debug("readme_parse_fallback", reason="no_section_examples")
        examples = extract_examples(GENERAL_USAGE_TITLE, text)

    unique = deduplicate_examples(examples)
    log.debug(
        "readme_parse_complete",
        example_count=len(unique),
        duplicates_dropped=len(examples) - len(unique),
    )
    return unique


_PODFILE_RE = re.compile(r"pod\s+['\"][^'\"]+['\"]", re.I)
_CARTHAGE_RE = re.compile(r"github\s+['\"][^'\"]+/[^'\"]+['\"]", re.I)
_SPM_RE = re.compile(r"https://github\.com/[^\s)]+")

INSTALLATION_PROBES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("podfile", _PODFILE_RE),
    ("carthage", _CARTHAGE_RE),
    ("spm", _SPM_RE),
)


def extract_installation_instructions(text: str) -> InstallationInstructions:
    """Probe ``text`` for Podfile, Carthage and SwiftPM snippets independently."""
    if not isinstance(text, str):
        return InstallationInstructions()

    found: dict[str, str] = {}
    for field_name, pattern in INSTALLATION_PROBES:
        match = pattern.search(text)
        if match:
            found[field_name] = match.group(0)
    return InstallationInstructions(**found)
