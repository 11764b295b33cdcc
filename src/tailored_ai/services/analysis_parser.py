"""Markdown review parser; the only place that scrapes LLM review text.

The model is asked for a Markdown document with a handful of known section
headers.  Anything it leaves out (or garbles) falls back to a fixed default,
so :func:`parse_analysis` always returns a complete :class:`ParsedAnalysis`.

Recognised sections (matched case-insensitively inside ``#`` headers):

==================  =====================================================
Section             Header text containing
==================  =====================================================
recruiters view     "recruiter"
resume bullet       "resume" / "cv bullet"
score               "score" / "rating"
suggestions         "suggestion" / "improvement" / "recommendation"
project summary     "what this project does" / "summary" / "overview"
==================  =====================================================
"""

from __future__ import annotations

import re

from tailored_ai.domain.entities import AnalysisSuggestion, ParsedAnalysis

DEFAULT_ANALYSIS = "Analysis completed"
DEFAULT_SCORE = 75
DEFAULT_PROJECT_SUMMARY = (
    "A well-structured software project demonstrating modern development practices."
)
DEFAULT_RESUME_BULLET = "Built a software project using modern technologies"
DEFAULT_RECRUITERS_VIEW = "This repository demonstrates good technical skills"
DEFAULT_IMPROVEMENT_PRIORITIES: tuple[str, ...] = (
    "Improve documentation",
    "Add live demo",
    "Enhance code structure",
)
MAX_IMPROVEMENT_PRIORITIES = 3

_SECTION_ALIASES: list[tuple[str, tuple[str, ...]]] = [
    ("recruiters", ("recruiter",)),
    ("resume", ("resume", "cv bullet")),
    ("score", ("score", "rating")),
    ("suggestions", ("suggestion", "improvement", "recommendation")),
    ("summary", ("what this project does", "summary", "overview")),
]

_HEADER_RE = re.compile(r"^\s{0,3}#{1,6}\s*(?P<title>.*?)\s*#*\s*$")
_BULLET_RE = re.compile(r"^\s*(?:[-*+•]|\d+[.)])\s+(?P<body>.+)$")
_SCORE_RE = re.compile(r"(?<![\d.])(?P<value>\d{1,3}(?:\.\d+)?)\s*/\s*(?P<scale>100|10)\b")
_PRIORITY_RE = re.compile(
    r"[\(\[]\s*(?:priority\s*:?\s*)?(?P<priority>high|medium|low)(?:\s+priority)?\s*[\)\]]",
    re.IGNORECASE,
)
_TITLE_SPLIT_RE = re.compile(r"\s*(?::|\s-\s)\s*")


def parse_analysis(
    text: str | None,
    *,
    fallback_resume_bullet: str = DEFAULT_RESUME_BULLET,
) -> ParsedAnalysis:
    """Parse a Markdown review into a :class:`ParsedAnalysis`; never raises."""
    body = text.strip() if isinstance(text, str) else ""
    sections = _split_sections(body)

    suggestions = [_parse_suggestion(line) for line in _bullets(sections.get("suggestions", []))]
    priorities = [s.title for s in suggestions if s.priority == "high"][
        :MAX_IMPROVEMENT_PRIORITIES
    ]

    return ParsedAnalysis(
        analysis=body or DEFAULT_ANALYSIS,
        project_summary=_joined(sections.get("summary", [])) or DEFAULT_PROJECT_SUMMARY,
        suggestions=suggestions,
        score=_parse_score(sections.get("score", []), body),
        resume_bullet=_first_line(sections.get("resume", [])) or fallback_resume_bullet,
        recruiters_view=_joined(sections.get("recruiters", [])) or DEFAULT_RECRUITERS_VIEW,
        improvement_priorities=priorities or list(DEFAULT_IMPROVEMENT_PRIORITIES),
    )


def section_key(title: str) -> str | None:
    """Map a header title onto one of the known section keys."""
    normalized = re.sub(r"[^a-z0-9 ]+", " ", title.lower())
    normalized = " ".join(normalized.split())
    for key, aliases in _SECTION_ALIASES:
        if any(alias in normalized for alias in aliases):
            return key
    return None


def _split_sections(body: str) -> dict[str, list[str]]:
    sections: dict[str, list[str]] = {}
    current: str | None = None
    for line in body.splitlines():
        header = _HEADER_RE.match(line) if line.lstrip().startswith("#") else None
        if header:
            current = section_key(header["title"])
            if current is not None:
                sections.setdefault(current, [])
            continue
        if current is not None and line.strip():
            sections[current].append(line.strip())
    return sections


def _bullets(lines: list[str]) -> list[str]:
    bullets: list[str] = []
    for line in lines:
        match = _BULLET_RE.match(line)
        if match:
            bullets.append(match["body"].strip())
    return bullets


def _parse_suggestion(line: str) -> AnalysisSuggestion:
    priority = "medium"
    match = _PRIORITY_RE.search(line)
    if match:
        priority = match["priority"].lower()
        line = (line[: match.start()] + line[match.end() :]).strip()
    line = _strip_markup(line)
    parts = _TITLE_SPLIT_RE.split(line, maxsplit=1)
    title = parts[0].strip()
    description = parts[1].strip() if len(parts) > 1 else ""
    return AnalysisSuggestion(title=title, description=description, priority=priority)


def _parse_score(score_lines: list[str], body: str) -> int:
    for haystack in ("\n".join(score_lines), body):
        match = _SCORE_RE.search(haystack)
        if not match:
            continue
        value = float(match["value"])
        scale = int(match["scale"])
        if value > scale:
            continue
        return round(max(0.0, min(value / scale * 100, 100.0)))
    return DEFAULT_SCORE


def _first_line(lines: list[str]) -> str:
    for line in lines:
        match = _BULLET_RE.match(line)
        cleaned = _strip_markup(match["body"] if match else line).strip("\"'“” ")
        if cleaned:
            return cleaned
    return ""


def _joined(lines: list[str]) -> str:
    return " ".join(_strip_markup(line) for line in lines).strip()


def _strip_markup(text: str) -> str:
    return text.replace("**", "").replace("__", "").strip()
