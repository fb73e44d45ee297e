"""
Prompt template for scope classification.

The reply must be exactly one word: narrow, medium or broad.
"""

from __future__ import annotations

from transcript_search.core.config import settings


def build_scope_prompt(
    query: str,
    library_description: str | None = None,
) -> tuple[str, str]:
    """
    Build the system and user prompts for scope classification.

    Returns:
        (system_prompt, user_prompt)
    """
    library = library_description or settings.library_description
    system_prompt = (
        f"Classify the user's search query over {library} into exactly one "
        "category. Reply with a single word: narrow, medium, or broad.\n\n"
        "narrow = a specific single sermon, a specific passage/quote, or a very "
        "focused speaker+topic question expecting one or two sermons\n"
        "medium = a theme or doctrine across several sermons, a speaker's "
        "teaching on a topic, summarising a series, or a speaker's general "
        "teaching\n"
        "broad = comparative across many sermons or multiple speakers, sweeping "
        'themes, "everything about X", or questions spanning the whole library'
    )
    return system_prompt, query
