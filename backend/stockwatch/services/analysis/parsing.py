"""
Heuristic parsers for free-text AI output.

The provider returns prose, not a schema. Section parsing runs in two stages:
parse_sections() recognizes headed sections and returns None when it finds
no header at all; split_into_thirds() is the fallback for that case. Both are
pure so each path can be tested on its own.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import re
import logging

from stockwatch.services.data.normalized import FinancialEvent, StockAnalysis

logger = logging.getLogger(__name__)

RECENT = "recent"
EVENTS = "events"
VALUATION = "valuation"

PLACEHOLDERS = {
    RECENT: "No recent news available",
    EVENTS: "No major events identified",
    VALUATION: "Valuation assessment unavailable",
}

# Numbered headers as requested in the prompt: "1. Most recent news ..."
_NUMBERED_HEADER = re.compile(r"^([123])[.)](\s|$)")
_NUMBER_TO_SECTION = {"1": RECENT, "2": EVENTS, "3": VALUATION}
_KEYWORD_TO_SECTION = (
    ("recent news", RECENT),
    ("major events", EVENTS),
    ("valuation", VALUATION),
)
# Keyword headers are short; longer lines mentioning "valuation" are content
_MAX_KEYWORD_HEADER_LENGTH = 60
_BULLET = re.compile(r"^(?:•|-(?!-)|\*(?!\*))\s*")
_MIN_UNLABELED_LENGTH = 10

_EVENT_LINE = re.compile(
    r"(\d{4}-\d{2}-\d{2})\s*\|\s*([^|]+?)\s*\|\s*(positive|negative|neutral)\b",
    re.IGNORECASE,
)
MAX_EVENT_DESCRIPTION = 50
MAX_EVENTS = 10


@dataclass
class AnalysisSections:
    recent_news: List[str] = field(default_factory=list)
    major_events: List[str] = field(default_factory=list)
    valuation_assessment: List[str] = field(default_factory=list)

    def section(self, name: str) -> List[str]:
        return {
            RECENT: self.recent_news,
            EVENTS: self.major_events,
            VALUATION: self.valuation_assessment,
        }[name]


def _content_lines(content: str) -> List[str]:
    return [line.strip() for line in (content or "").splitlines() if line.strip()]


def _detect_header(line: str) -> Optional[str]:
    """Return the section a header line opens, or None for content lines."""
    if _BULLET.match(line):
        return None
    # Drop markdown heading/bold decoration: "## 2. **Major events**"
    text = line.lstrip("#").strip().strip("*").strip()
    numbered = _NUMBERED_HEADER.match(text)
    if numbered:
        return _NUMBER_TO_SECTION[numbered.group(1)]
    if len(text) <= _MAX_KEYWORD_HEADER_LENGTH:
        lowered = text.lower()
        for keyword, section in _KEYWORD_TO_SECTION:
            if keyword in lowered:
                return section
    return None


def parse_sections(content: str) -> Optional[AnalysisSections]:
    """Assign lines to the most recently seen section header.

    Bullet markers are stripped; unlabeled lines longer than 10 characters go
    to the open section. Returns None if no header was ever recognized.
    """
    sections = AnalysisSections()
    current: Optional[str] = None
    saw_header = False

    for line in _content_lines(content):
        header = _detect_header(line)
        if header:
            current = header
            saw_header = True
            continue
        if current is None:
            continue
        if _BULLET.match(line):
            item = _BULLET.sub("", line).strip()
            if item:
                sections.section(current).append(item)
        elif len(line) > _MIN_UNLABELED_LENGTH:
            sections.section(current).append(line)

    return sections if saw_header else None


def split_into_thirds(content: str) -> AnalysisSections:
    """Fallback: three contiguous chunks of (nearly) equal line count."""
    lines = _content_lines(content)
    n = len(lines)
    bounds = [i * n // 3 for i in range(4)]
    return AnalysisSections(
        recent_news=lines[bounds[0]:bounds[1]],
        major_events=lines[bounds[1]:bounds[2]],
        valuation_assessment=lines[bounds[2]:bounds[3]],
    )


def fill_placeholders(sections: AnalysisSections) -> AnalysisSections:
    """Make sure the UI never renders an empty panel."""
    for name, placeholder in PLACEHOLDERS.items():
        items = sections.section(name)
        if not items:
            items.append(placeholder)
    return sections


def build_analysis(ticker: str, content: str, now: datetime) -> StockAnalysis:
    """Parse AI output into a StockAnalysis (events are attached by the caller)."""
    sections = parse_sections(content)
    if sections is None:
        logger.warning(f"No section headers found in analysis for {ticker}, using fallback split")
        sections = split_into_thirds(content)
    fill_placeholders(sections)

    return StockAnalysis(
        ticker=ticker,
        recent_news=sections.recent_news,
        major_events=sections.major_events,
        valuation_assessment=sections.valuation_assessment,
        events=[],
        last_updated=now,
    )


def parse_financial_events(content: str) -> List[FinancialEvent]:
    """Keep lines shaped like `YYYY-MM-DD | description | impact`.

    Everything else is discarded. Result is sorted oldest first and capped
    at MAX_EVENTS.
    """
    events: List[FinancialEvent] = []

    for line in _content_lines(content):
        match = _EVENT_LINE.search(line)
        if not match:
            continue
        date_str, description, impact = match.groups()
        try:
            datetime.strptime(date_str, "%Y-%m-%d")
        except ValueError:
            continue
        description = description.strip()[:MAX_EVENT_DESCRIPTION].strip()
        if not description:
            continue
        events.append(FinancialEvent(
            date=date_str,
            description=description,
            impact=impact.lower(),
        ))

    events.sort(key=lambda e: e.date)
    return events[:MAX_EVENTS]
