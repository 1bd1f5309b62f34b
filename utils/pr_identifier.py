#!/usr/bin/env python3
"""Recover pull request numbers from commit summaries.

Squash merges usually end with ``(#1234)``; merge commits read
``Merge pull request #987 from user/branch``. Tokens are scanned from the end
of the summary and the first one that matches wins.
"""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

PAREN_PR_RE = re.compile(r"\(#(\d+)\)")
HASH_PR_RE = re.compile(r"#(\d+)")


class MalformedPrToken(Exception):
    """A ``#``-prefixed token whose body is not numeric."""
    def __init__(self, message: str, code: str = "MALFORMED_PR_TOKEN") -> None:
        super().__init__(message)
        self.code = code


def parse_pr_token(token: str) -> Optional[int]:
    """Parse one whitespace-delimited token.

    Returns:
        The PR number, or None if the token is not PR-shaped at all

    Raises:
        MalformedPrToken: If the token starts like a PR reference but the body is not digits
    """
    match = PAREN_PR_RE.fullmatch(token)
    if match:
        return int(match.group(1))
    match = HASH_PR_RE.fullmatch(token)
    if match:
        return int(match.group(1))
    if token.startswith("#") or token.startswith("(#"):
        raise MalformedPrToken(f"Non-numeric PR token: {token!r}")
    return None


def extract_pr_id(summary: str) -> Optional[int]:
    if not summary:
        return None
    for token in reversed(summary.split()):
        try:
            pr_id = parse_pr_token(token)
        except MalformedPrToken as e:
            logger.debug(f"{e}; continuing scan")
            continue
        if pr_id is not None:
            return pr_id
    return None
