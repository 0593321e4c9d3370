"""Turns plain-text job descriptions into structured blocks for display"""

import re
from dataclasses import dataclass, field, asdict
from typing import List, Optional


SECTION_WORDS = (
    r"REQUIREMENTS|QUALIFICATIONS|RESPONSIBILITIES|ABOUT US|SKILLS|EXPERIENCE|DUTIES|"
    r"EDUCATION|BENEFITS|JOB DESCRIPTION|WHAT YOU'LL DO"
)
SECTION_HEADINGS = (
    r"REQUIREMENTS|QUALIFICATIONS|RESPONSIBILITIES|ABOUT US|SKILLS|EXPERIENCE|EDUCATION|"
    r"BENEFITS|KEY RESPONSIBILITIES|JOB DESCRIPTION|WHO WE ARE|WHAT YOU'LL DO|DUTIES"
)

BULLET = r"[*\-•]|\d+\."

_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_SECTION_BREAK = re.compile(rf"\b({SECTION_WORDS})\b", re.IGNORECASE)
_BULLET_SPACING = re.compile(rf"^(\s*)({BULLET})\s?(?=\S)", re.MULTILINE)
# URLs keep their "scheme://" intact
_COLON_SPACING = re.compile(r"(\w+):(?!//)(\S)")
_SENTENCE_BREAK = re.compile(r"\.(\s)([A-Z])")
_INLINE_LIST = re.compile(rf"([a-z])(\s*)(\n?)(\s*)({BULLET})\s+")
_LEADING_BULLET = re.compile(rf"^\s*({BULLET})\s+")

_HEADER = re.compile(r"^[A-Z][A-Z\s\d]{3,}$")
_SECTION = re.compile(rf"^({SECTION_HEADINGS})[\s:-]*", re.IGNORECASE)
_TITLE_CASE = re.compile(r"^([A-Z][a-z]+\s?)+:?$")
_LABEL_ONLY = re.compile(r"^[A-Za-z\s\d]{3,}:$")
_SHORT_LABEL = re.compile(r"^[\w\s]+:")
_BULLET_LINE = re.compile(rf"^(\s*)({BULLET})\s+(.+)$")
_SKILL_WORDS = re.compile(
    r"(experience|knowledge|proficient|skill|degree|familiar|years|education|qualification|required)",
    re.IGNORECASE,
)
_EMAIL = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
_PHONE = re.compile(r"\+?\d[\d\s()-]{6,}")
_APPLY = re.compile(r"apply|email your|send your|application|submit your", re.IGNORECASE)
_JOB_DETAIL = re.compile(
    r"\b(salary|compensation|location|contract|remote|position|start date|job type|duration)[:]",
    re.IGNORECASE,
)
_URL = re.compile(r"(https?://[^\s]+)")


@dataclass
class TextSegment:
    """A run of text; ``href`` is set when the run is a link"""
    text: str
    href: Optional[str] = None


@dataclass
class DescriptionBlock:
    """
    One rendered line of a job description

    Attributes:
        kind: gap, header, section, subheader, bullet, contact, apply, detail,
            paragraph or list_item
        text: Line text without surrounding whitespace (bullet text excludes the marker)
        segments: Text split into plain and link segments
        marker: Bullet marker for bullet blocks
        emphasis: Whether the block should stand out (skills in bullets,
            long paragraphs get relaxed spacing instead)
        spaced: Whether extra spacing precedes the block (first bullet of a list)
    """
    kind: str
    text: str = ""
    segments: List[TextSegment] = field(default_factory=list)
    marker: Optional[str] = None
    emphasis: bool = False
    spaced: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def linkify(text: str) -> List[TextSegment]:
    """Split text into plain and link segments"""
    if not text:
        return [TextSegment(text="")]
    segments = []
    for part in _URL.split(text):
        if not part:
            continue
        if _URL.fullmatch(part):
            segments.append(TextSegment(text=part, href=part))
        else:
            segments.append(TextSegment(text=part))
    return segments


def _preprocess(description: str) -> str:
    text = _EXCESS_NEWLINES.sub("\n\n", description)
    text = _SECTION_BREAK.sub(r"\n\1", text)
    text = _BULLET_SPACING.sub(r"\1\2 ", text)
    text = _COLON_SPACING.sub(r"\1: \2", text)
    text = _SENTENCE_BREAK.sub(r".\n\2", text)
    text = _INLINE_LIST.sub(r"\1\n\5 ", text)

    lines = []
    for line in text.split("\n"):
        if _LEADING_BULLET.match(line) and not line.startswith("  "):
            line = "  " + line
        lines.append(line)
    return "\n".join(lines)


def _is_subheader(line: str, stripped: str) -> bool:
    return bool(
        (_TITLE_CASE.match(stripped) and len(line) < 60)
        or (_LABEL_ONLY.match(stripped) and " " not in stripped)
        or (len(stripped) < 40 and _SHORT_LABEL.match(stripped))
    )


def format_description(description: str) -> List[DescriptionBlock]:
    """
    Format a plain-text job description into display blocks

    The text is normalized first (section words start new lines, bullets and
    colons get spacing, sentences and inline lists are broken onto their own
    lines) and every resulting line is then classified by pattern.

    Args:
        description: Raw description text from the jobs API

    Returns:
        List of DescriptionBlock in display order
    """
    if not description:
        text = "No description available."
        return [DescriptionBlock(kind="paragraph", text=text, segments=linkify(text))]

    in_list = False
    prev_line_was_list = False
    blocks: List[DescriptionBlock] = []

    for line in _preprocess(description).split("\n"):
        stripped = line.strip()

        if not stripped:
            prev_line_was_list = in_list
            in_list = False
            blocks.append(DescriptionBlock(kind="gap"))
            continue

        if _HEADER.match(stripped) and len(stripped) > 4:
            in_list = False
            blocks.append(DescriptionBlock(kind="header", text=stripped, segments=[TextSegment(stripped)]))
            continue

        if _SECTION.match(stripped):
            in_list = False
            blocks.append(DescriptionBlock(kind="section", text=stripped, segments=[TextSegment(stripped)]))
            continue

        if _is_subheader(line, stripped):
            in_list = False
            blocks.append(DescriptionBlock(kind="subheader", text=stripped, segments=[TextSegment(stripped)]))
            continue

        bullet = _BULLET_LINE.match(line)
        if bullet:
            _, marker, content = bullet.groups()
            spaced = not prev_line_was_list and not in_list
            in_list = True
            prev_line_was_list = True
            blocks.append(DescriptionBlock(
                kind="bullet",
                text=content,
                segments=linkify(content),
                marker=marker,
                emphasis=bool(_SKILL_WORDS.search(content)),
                spaced=spaced,
            ))
            continue

        prev_line_was_list = in_list

        if _EMAIL.search(line) or _PHONE.search(line):
            in_list = False
            blocks.append(DescriptionBlock(kind="contact", text=stripped, segments=[TextSegment(stripped)]))
            continue

        if _APPLY.search(line) and len(line) < 100:
            in_list = False
            blocks.append(DescriptionBlock(kind="apply", text=stripped, segments=linkify(stripped)))
            continue

        if _JOB_DETAIL.search(line) and len(line) < 100:
            in_list = False
            blocks.append(DescriptionBlock(kind="detail", text=stripped, segments=[TextSegment(stripped)]))
            continue

        if in_list:
            blocks.append(DescriptionBlock(kind="list_item", text=stripped, segments=linkify(stripped)))
        else:
            blocks.append(DescriptionBlock(
                kind="paragraph",
                text=stripped,
                segments=linkify(stripped),
                emphasis=len(stripped) > 200,
            ))

    return blocks
