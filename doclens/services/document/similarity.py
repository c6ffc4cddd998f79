"""Word-overlap similarity and text search over document blocks."""

from doclens.enums import MatchType
from doclens.services.document.models import DocumentContent, MatchResult, SearchOptions


def similarity(a: str, b: str) -> float:
    """
    Share of words of ``a`` that also appear in ``b``.

    Divides by the larger word count, so ``similarity("a b c", "a b") == 2/3``.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    words_a = a.split()
    words_b = b.split()
    total = max(len(words_a), len(words_b))
    if total == 0:
        return 0.0

    common = [word for word in words_a if word in words_b]
    return len(common) / total


def matches(text: str, target: str, tolerance: float) -> bool:
    """Containment (case-insensitive, trimmed) or similarity >= tolerance."""
    if not text or not target:
        return False

    normalized_text = text.lower().strip()
    normalized_target = target.lower().strip()

    if normalized_target in normalized_text:
        return True

    return similarity(normalized_text, normalized_target) >= tolerance


def text_confidence(text: str, target: str) -> float:
    return similarity(text.lower(), target.lower())


def extract_context(full_text: str, search_text: str, context_length: int) -> str:
    """Window of text around the first occurrence, with '...' where truncated."""
    search_index = full_text.lower().find(search_text.lower())
    if search_index == -1:
        return full_text[:context_length]

    # An odd length puts the extra character before the match.
    start = max(0, search_index - (context_length + 1) // 2)
    end = min(len(full_text), search_index + len(search_text) + context_length // 2)

    context = full_text[start:end]
    if start > 0:
        context = "..." + context
    if end < len(full_text):
        context = context + "..."
    return context


def search_text(
    content: DocumentContent,
    search: str,
    options: SearchOptions,
) -> list[MatchResult]:
    """
    Find every text block matching ``search``.

    Args:
        content: Geometric model of the document
        search: Text to look for
        options: Case, fuzzy and result-count settings

    Returns:
        Matches sorted by descending confidence, at most ``max_results``
    """
    needle = search if options.case_sensitive else search.lower()
    results: list[MatchResult] = []

    for block in content.text_blocks:
        haystack = block.text if options.case_sensitive else block.text.lower()
        context = extract_context(block.text, search, options.context_length)

        if options.fuzzy_match:
            score = similarity(haystack, needle)
            if score >= options.tolerance:
                results.append(
                    MatchResult(
                        page=block.page,
                        position=block.position,
                        matched_text=block.text,
                        confidence=score,
                        match_type=MatchType.FUZZY,
                        context=context,
                    )
                )
        else:
            match_index = haystack.find(needle)
            if match_index != -1:
                results.append(
                    MatchResult(
                        page=block.page,
                        position=block.position,
                        matched_text=block.text,
                        confidence=1.0,
                        match_type=MatchType.EXACT,
                        context=context,
                        match_index=match_index,
                    )
                )

    results.sort(key=lambda r: r.confidence, reverse=True)
    return results[: options.max_results]
