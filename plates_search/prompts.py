"""Prompt templates for classification, direct answers and grounded answers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from plates_search.models import SearchResult

DOMAIN_PREAMBLE = (
    "You are a helpful AI assistant specializing in Islamic knowledge. "
    "Please respond in the same language as the input question.\n\n"
)


def build_needs_search_prompt(query: str) -> str:
    return (
        "Analyze this query and determine if it requires web search for accurate answers. "
        f'Reply with ONLY "yes" or "no":\n"{query}"'
    )


def build_optimize_prompt(query: str) -> str:
    return (
        f'Convert this query into 2 short, focused search terms (max 5 words each): "{query}". '
        "Output only the terms, one per line starting with -."
    )


def build_direct_answer_prompt(query: str) -> str:
    return f"Please provide a clear, concise explanation of: {query}"


def format_source_block(result: SearchResult) -> str:
    """Format one aggregated result as a labelled context block."""
    quotes_text = ""
    if result.quotes:
        quotes_text = "\nQUOTES FROM THIS SOURCE:\n" + "\n".join(
            q.citation() for q in result.quotes
        )
    return f'SOURCE: "{result.title}" ({result.url})\nCONTENT:\n{result.content}{quotes_text}\n---\n'


_FORMATTING_RULES = """FORMATTING RULES:
1. Use ONLY information provided in the context above
2. If quoting directly, format EXACTLY as follows:
   - For Quran verses: {{Verse text (Surah Al-Name 2:255)}}
   - For hadiths: "Hadith text" [Sahih Bukhari 123]
   - For longer passages: a block quote (lines starting with "> ") followed by the book name in brackets on the next line, e.g. [Sahih Muslim]
   - Use the ACTUAL BOOK NAME as the source (e.g., Fatawa Islamiyah, Sahih Muslim, Bulugh al-Maram)
   - Do NOT cite scholars or narrators as sources - use the BOOK NAME instead
   - Always include the URL with quotes when available
3. Use markdown "### " (H3) format for {heading_scope} heading
4. Start with a "### Introduction" or "### Overview" section
5. When mentioning Islamic rulings like "it is haram/halal/permissible", use bold format like **this is haram**
"""

_MULTI_TOPIC_GUIDELINES = """CONTENT GUIDELINES:
1. Present multiple viewpoints when available
2. If context lacks clear evidence, acknowledge the limitations
3. Make each section comprehensive and able to stand alone
4. Elaborate in detail on each point with thorough explanations
5. Put relevant quotes in each section where appropriate
6. When mentioning a scholar, always include their FULL name with honorifics
"""

_SINGLE_TOPIC_GUIDELINES = """CONTENT GUIDELINES:
1. Present multiple viewpoints when available
2. If context lacks clear evidence, acknowledge the limitations
3. Elaborate in detail with thorough explanations and examples
4. Put quotes in separate paragraphs with proper attribution
5. For Islamic rulings, clearly state the basis of the ruling
6. When mentioning a scholar, always include their FULL name with honorifics
"""


def build_answer_prompt(
    question: str,
    results: list[SearchResult],
    multi_topic: bool = False,
    topics: list[str] | None = None,
) -> str:
    """Build the single grounded-answer prompt embedding every aggregated source.

    When *multi_topic* is set and more than one topic was split out of the
    question, the topics are listed so each gets its own section.
    """
    web_context = "\n".join(format_source_block(r) for r in results)

    if multi_topic:
        intro = (
            DOMAIN_PREAMBLE.replace(
                "Please respond",
                "The user has asked a question with multiple topics or aspects. Please respond",
            )
            + "For each topic or aspect of the question, create a dedicated section with a clear heading.\n\n"
        )
        if topics and len(topics) > 1:
            intro += "Topics to cover:\n" + "\n".join(f"- {t}" for t in topics) + "\n\n"
        rules = _FORMATTING_RULES.format(heading_scope="EACH main section")
        guidelines = _MULTI_TOPIC_GUIDELINES
    else:
        intro = DOMAIN_PREAMBLE
        rules = _FORMATTING_RULES.format(heading_scope="ALL section")
        guidelines = _SINGLE_TOPIC_GUIDELINES

    return (
        f"{intro}"
        f"Context from Islamic sources:\n{web_context}\n"
        f"Question: {question}\n\n"
        f"{rules}\n"
        f"{guidelines}\n"
        "Begin Response:"
    )
