"""
Problem Page Extractor for psup.

Turns the markup of a problem page into a normalized Problem:
- title, statement, input and output sections as multi-line text
- time and memory limits from the info table
- sample input/output pairs in document order

Only a missing title is an error; every other field degrades to an
empty value.
"""

import logging
import re
from typing import List, Optional, Protocol

from bs4 import BeautifulSoup
from bs4.element import Tag

from .errors import ParseFailure
from .schemas import Problem, Sample

logger = logging.getLogger(__name__)

TITLE_SELECTOR = "#problem_title"
DESCRIPTION_SELECTOR = "#problem_description"
INPUT_SELECTOR = "#problem_input"
OUTPUT_SELECTOR = "#problem_output"
LIMITS_SELECTOR = "#problem-info tbody tr td"
LIMITS_FALLBACK_SELECTOR = "#problem-info tr td"
SAMPLE_INPUT_SELECTOR = '[id^="sample-input-"]'
SAMPLE_OUTPUT_SELECTOR = '[id^="sample-output-"]'

# <br>, <br/>, <br />, </p>, </div> in any case or spacing
BLOCK_END_PATTERN = re.compile(r"<br\s*/?\s*>|</p\s*>|</div\s*>", re.IGNORECASE)


class DocumentNode(Protocol):
    """A located element of a parsed document."""

    def text(self) -> str:
        """Concatenated text content."""
        ...

    def inner_html(self) -> str:
        """Markup of the element's children."""
        ...


class DocumentQuery(Protocol):
    """Selector-based access to a parsed document."""

    def select_one(self, selector: str) -> Optional[DocumentNode]:
        """First element matching a CSS selector, if any."""
        ...

    def select(self, selector: str) -> List[DocumentNode]:
        """All elements matching a CSS selector, in document order."""
        ...


class SoupNode:
    """DocumentNode backed by a BeautifulSoup tag."""

    def __init__(self, tag: Tag):
        self._tag = tag

    def text(self) -> str:
        return self._tag.get_text()

    def inner_html(self) -> str:
        return self._tag.decode_contents()


class SoupDocument:
    """DocumentQuery backed by BeautifulSoup."""

    def __init__(self, markup: str):
        self._soup = BeautifulSoup(markup, "html.parser")

    def select_one(self, selector: str) -> Optional[SoupNode]:
        tag = self._soup.select_one(selector)
        return SoupNode(tag) if tag is not None else None

    def select(self, selector: str) -> List[SoupNode]:
        return [SoupNode(tag) for tag in self._soup.select(selector)]


def normalize_block_text(inner_html: str) -> str:
    """
    Convert section markup into multi-line text.

    Block-ending tags become newlines before the fragment is re-parsed,
    because plain text extraction would run adjacent blocks together.
    Each line is trimmed and blank lines at both ends are dropped.
    """
    rewritten = BLOCK_END_PATTERN.sub("\n", inner_html)
    text = BeautifulSoup(rewritten, "html.parser").get_text()
    lines = [line.strip() for line in text.splitlines()]
    return "\n".join(lines).strip()


def _section_text(document: DocumentQuery, selector: str) -> str:
    node = document.select_one(selector)
    return normalize_block_text(node.inner_html()) if node else ""


def _extract_limits(document: DocumentQuery) -> List[str]:
    """First two cells of the info table: time limit, memory limit."""
    nodes = document.select(LIMITS_SELECTOR)
    if not nodes:
        # html.parser does not insert an implicit <tbody>
        nodes = document.select(LIMITS_FALLBACK_SELECTOR)
    cells = [cell.text().strip() for cell in nodes[:2]]
    return cells + [""] * (2 - len(cells))


def _extract_samples(document: DocumentQuery) -> List[Sample]:
    inputs = [node.text().strip() for node in document.select(SAMPLE_INPUT_SELECTOR)]
    outputs = [node.text().strip() for node in document.select(SAMPLE_OUTPUT_SELECTOR)]

    if len(inputs) != len(outputs):
        logger.warning(
            f"Sample count mismatch: {len(inputs)} inputs, {len(outputs)} outputs"
        )

    # zip stops at the shorter list
    return [Sample(input=i, output=o) for i, o in zip(inputs, outputs)]


def extract_problem(problem_id: str, document: DocumentQuery) -> Problem:
    """
    Build a Problem from an already parsed document.

    Raises:
        ParseFailure: If the title is missing or empty
    """
    title_node = document.select_one(TITLE_SELECTOR)
    title = title_node.text().strip() if title_node else ""

    if not title:
        raise ParseFailure("title")

    time_limit, memory_limit = _extract_limits(document)

    return Problem(
        id=problem_id,
        title=title,
        description=_section_text(document, DESCRIPTION_SELECTOR),
        input_description=_section_text(document, INPUT_SELECTOR),
        output_description=_section_text(document, OUTPUT_SELECTOR),
        samples=_extract_samples(document),
        time_limit=time_limit,
        memory_limit=memory_limit,
    )


def parse_problem(problem_id: str, markup: str) -> Problem:
    """
    Parse problem page markup into a Problem.

    Args:
        problem_id: Identifier the page was fetched for
        markup: Raw HTML of the page

    Returns:
        Normalized Problem

    Raises:
        ParseFailure: If no title could be extracted
    """
    problem = extract_problem(problem_id, SoupDocument(markup))
    logger.debug(f"Parsed problem {problem_id}: {problem.title!r}, {len(problem.samples)} sample(s)")
    return problem
