"""Locate the ``shelfMapping`` object embedded in App Store product pages.

The product page ships its data as JSON inside a ``<script>`` block. The
media shelves (screenshots per device) live under a ``shelfMapping`` key
somewhere in that tree; its exact position changes between page revisions,
so the tree is searched rather than addressed by path.
"""

import json
import logging
from typing import Optional, Union

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

JsonValue = Union[dict, list, str, int, float, bool, None]

SHELF_MAPPING_KEY = "shelfMapping"
DEFAULT_MAX_DEPTH = 64


def find_script_payload(html: str, marker: str = SHELF_MAPPING_KEY) -> Optional[str]:
    """
    Return the inner text of the first ``<script>`` block mentioning ``marker``.

    Args:
        html: Raw page HTML
        marker: Literal that must appear in the block

    Returns:
        Script contents or None if no block matches
    """
    if not html:
        return None

    soup = BeautifulSoup(html, "lxml")
    for script in soup.find_all("script"):
        if marker in str(script):
            return script.string or ""

    return None


def parse_script_payload(text: str) -> Optional[JsonValue]:
    """
    Parse a script payload as JSON.

    Falls back to the substring between the first ``{`` and the last ``}``
    for payloads wrapped in JavaScript (``window.data = {...};``). The
    fallback is not validated: it only has to parse. Payloads nested too deeply
    for the JSON decoder count as unparseable.
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError, RecursionError):
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None

    try:
        return json.loads(text[start:end + 1])
    except (json.JSONDecodeError, RecursionError):
        logger.debug("Script payload is not JSON, even after brace slicing")
        return None


def find_key(tree: JsonValue, key: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Optional[JsonValue]:
    """
    Depth-first search for the first object whose ``key`` holds a truthy value.

    Objects are visited before their children and children in document
    order. Nodes deeper than ``max_depth`` are not inspected and containers
    already seen are skipped, so hostile or self-referencing input cannot
    run away.

    Returns:
        The value stored under ``key``, or None
    """
    stack: list[tuple[JsonValue, int]] = [(tree, 0)]
    seen: set[int] = set()

    while stack:
        node, depth = stack.pop()

        if isinstance(node, dict):
            children = list(node.values())
            value = node.get(key)
            if value:
                return value
        elif isinstance(node, list):
            children = node
        else:
            continue

        if id(node) in seen:
            continue
        seen.add(id(node))

        if depth >= max_depth:
            continue

        for child in reversed(children):
            if isinstance(child, (dict, list)):
                stack.append((child, depth + 1))

    return None


def extract_shelf_mapping(html: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Optional[dict]:
    """
    Pull the shelf mapping out of a product page.

    Never raises: a page without a matching script, with an unparseable
    payload or without a mapping all return None, meaning "no scraped data".
    """
    payload = find_script_payload(html)
    if payload is None:
        logger.debug("No script block contains shelfMapping")
        return None

    tree = parse_script_payload(payload)
    if tree is None:
        return None

    mapping = find_key(tree, SHELF_MAPPING_KEY, max_depth=max_depth)
    if not isinstance(mapping, dict):
        logger.debug("Parsed page data has no shelfMapping object")
        return None

    return mapping
