"""
Problem Page Fetcher for psup.

Handles communication with the judge's problem pages:
- One GET per problem, with a browser user agent and explicit timeout
- Non-success status reported as ProblemNotFoundError
- Transport and decoding failures reported separately
- Async entry point that keeps the network wait off the event loop

No retries and no caching happen here; the store caches parsed problems.
"""

import asyncio
import logging
from typing import Optional

import requests

from .config import PROBLEM_URL_TEMPLATE, USER_AGENT, FETCH_TIMEOUT
from .errors import FetchError, ProblemNotFoundError, ReadError
from .extractor import parse_problem
from .schemas import Problem

logger = logging.getLogger(__name__)

REQUEST_HEADERS = {"User-Agent": USER_AGENT}


def build_problem_url(problem_id: str) -> str:
    """Build the problem page URL for an identifier."""
    return PROBLEM_URL_TEMPLATE.format(problem_id=problem_id)


def _declared_charset(response) -> Optional[str]:
    # requests reports ISO-8859-1 for any text/* without a charset
    content_type = response.headers.get("Content-Type", "")
    if "charset" not in content_type.lower():
        return None
    return response.encoding


def fetch_problem_page(problem_id: str) -> str:
    """
    Fetch the raw markup of a problem page.

    Args:
        problem_id: Problem identifier (assumed URL-safe)

    Returns:
        Page markup as text

    Raises:
        ProblemNotFoundError: Non-success HTTP status
        ReadError: Body could not be read or decoded
        FetchError: DNS, connection, timeout or other transport failure
    """
    url = build_problem_url(problem_id)
    logger.info(f"Fetching problem page: {url}")

    try:
        response = requests.get(url, headers=REQUEST_HEADERS, timeout=FETCH_TIMEOUT)
    except (requests.exceptions.ChunkedEncodingError,
            requests.exceptions.ContentDecodingError) as e:
        logger.warning(f"Failed to read problem page {url}: {e}")
        raise ReadError(str(e)) from e
    except requests.exceptions.RequestException as e:
        logger.warning(f"Problem page request failed: {e}")
        raise FetchError(str(e)) from e

    if not 200 <= response.status_code < 300:
        logger.warning(f"Problem page {url} returned status {response.status_code}")
        raise ProblemNotFoundError(problem_id, response.status_code)

    try:
        return response.content.decode(_declared_charset(response) or "utf-8")
    except (UnicodeDecodeError, LookupError) as e:
        logger.warning(f"Failed to decode problem page {url}: {e}")
        raise ReadError(str(e)) from e


async def fetch_problem(problem_id: str) -> Problem:
    """
    Fetch and parse a problem.

    The blocking HTTP call runs in a worker thread so other requests keep
    being served while waiting on the network.

    Raises:
        ProblemNotFoundError, FetchError, ReadError: see fetch_problem_page
        ParseFailure: Page has no title
    """
    markup = await asyncio.to_thread(fetch_problem_page, problem_id)
    return parse_problem(problem_id, markup)
