"""
Prompt template for query expansion.

Expansion is deliberately aggressive: closely related but
non-synonymous terms are welcome because the adaptive cutoff filters
weak matches later, while a term that is never searched for cannot be
recovered.
"""

from __future__ import annotations

from transcript_search.core.config import settings


def build_expansion_prompt(
    query: str,
    library_description: str | None = None,
) -> tuple[str, str]:
    """
    Build the system and user prompts for query expansion.

    Returns:
        (system_prompt, user_prompt)
    """
    library = library_description or settings.library_description
    system_prompt = (
        f"You are a search query expander for {library}. Given a user's search "
        "query, rewrite it as a single dense paragraph that includes the original "
        "query plus synonyms, related terms, and subtopics that a speaker might "
        "address under this heading.\n\n"
        'For example, "sixth commandment" should also mention: thou shalt not '
        "kill, murder, killing, manslaughter, suicide, self-harm, abortion, "
        "euthanasia, capital punishment, sanctity of life, bloodshed, taking "
        "life, preservation of life.\n\n"
        "Keep the original query terms. Add related terms naturally. Output one "
        "paragraph, not a list and not several alternatives. Do not explain; "
        "just output the expanded query."
    )
    return system_prompt, query
