#!/usr/bin/env python3
"""
Append missing placeholder tokens to the configured template documents.

For every template id in GOOGLE_TEMPLATE_*_DOC_ID, reads the document body
and appends each ``{{key}}`` it does not already contain, one per line, at
the end of the body in a single insertText request. Operators then move the
tokens into place by hand.

Run with: python scripts/bootstrap_placeholders.py
"""

import asyncio
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import httpx

from contractdesk.core.config import settings
from contractdesk.services.google_workspace import GoogleWorkspace
from contractdesk.services.placeholders import PLACEHOLDER_KEYS

logger = logging.getLogger("bootstrap_placeholders")


def document_text(document: dict) -> str:
    """Concatenate every text run in the document body."""
    chunks = []
    for element in (document.get("body") or {}).get("content") or []:
        for part in (element.get("paragraph") or {}).get("elements") or []:
            chunks.append((part.get("textRun") or {}).get("content") or "")
    return "".join(chunks)


def body_end_index(document: dict) -> int:
    content = (document.get("body") or {}).get("content") or []
    return max((element.get("endIndex") or 1 for element in content), default=1)


def missing_tokens(text: str) -> list[str]:
    return [f"{{{{{key}}}}}" for key in PLACEHOLDER_KEYS if f"{{{{{key}}}}}" not in text]


async def bootstrap_document(workspace: GoogleWorkspace, document_id: str) -> int:
    document = await workspace.get_document(document_id)
    missing = missing_tokens(document_text(document))
    if not missing:
        logger.info("%s already has every placeholder", document_id)
        return 0

    # The body always ends with a newline; insert just before it
    index = max(body_end_index(document) - 1, 1)
    await workspace.insert_text(document_id, index, "\n" + "\n".join(missing) + "\n")
    logger.info("%s: appended %d placeholder(s)", document_id, len(missing))
    return len(missing)


async def main() -> None:
    ids = settings.template_ids
    template_ids = [t for t in dict.fromkeys([ids.adjuster, ids.admin, ids.combined]) if t]
    if not template_ids:
        logger.error("No GOOGLE_TEMPLATE_*_DOC_ID configured")
        sys.exit(1)

    async with httpx.AsyncClient(timeout=settings.upstream_timeout) as http:
        workspace = GoogleWorkspace(settings, http)
        await workspace.authorize()
        for document_id in template_ids:
            await bootstrap_document(workspace, document_id)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    asyncio.run(main())
