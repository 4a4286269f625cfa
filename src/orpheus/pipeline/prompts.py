"""Prompt templates for the concept, image-brief and narration calls."""

import re

PODCAST_NAME = "Orpheus"
OPENING_LINE = f"Welcome to a new episode of {PODCAST_NAME}!"

HYPERBOLE_DENYLIST = (
    "groundbreaking",
    "exceptional",
    "intriguing",
    "revolutionary",
    "amazing",
    "incredible",
    "remarkable",
    "outstanding",
    "brilliant",
)

CONCEPTS_SYSTEM = (
    "You are an expert at extracting key visual concepts from academic papers and converting "
    "them into clear, concrete imagery. Focus on the main themes, methods, and outcomes that "
    "can be represented visually."
)

IMAGE_BRIEF_SYSTEM = (
    "You are an expert at creating detailed, specific prompts for DALL-E to generate research "
    "paper cover images. Create prompts that are concrete and specific, focusing on visual "
    "elements while maintaining a professional, academic aesthetic."
)


def _quoted_denylist() -> str:
    return ", ".join(f"'{word}'" for word in HYPERBOLE_DENYLIST)


SCRIPT_SYSTEM = (
    "You are an expert podcast host who specializes in making academic research accessible and "
    "engaging. Your style is conversational yet professional, focusing on clear and objective "
    "presentation of research findings. You must avoid sensational language, intense adjectives, "
    "or hyperbolic claims. Specifically, never use words like "
    f"{_quoted_denylist()}, or similar hyperbolic terms. Instead, present research in a balanced, "
    "evidence-based manner using precise, measured language. You never use formal section headers "
    "or academic jargon without explanation. You never read abbreviations in parentheses - "
    "instead, you naturally incorporate the full terms into your speech. Your tone is measured, "
    "precise, and maintains academic rigor while being accessible. When mentioning authors, "
    "follow the author instruction given with each paper exactly."
)


def concepts_message(title: str, abstract: str, keywords: str) -> str:
    return (
        "Extract the key idea from this research paper that could be represented in an image. "
        "Focus on concrete, visual elements, not abstract concepts.\n\n"
        f"Title: {title}\n"
        f"Abstract: {abstract}\n"
        f"Keywords: {keywords}\n\n"
        "Format your response as a comma-separated list of visual elements, "
        "being as specific as possible."
    )


def image_brief_message(title: str, keywords: str, visual_concepts: str) -> str:
    return (
        "Create a detailed DALL-E prompt for a research paper cover image. The image should be "
        "professional and suitable for an academic context.\n\n"
        f"Title: {title}\n"
        f"Keywords: {keywords}\n"
        f"Key Visual Concepts: {visual_concepts}\n\n"
        "Requirements:\n"
        "- Start with the art style/medium\n"
        "- Include specific visual elements\n"
        "- Maintain academic professionalism\n"
        "- Avoid abstract concepts unless they can be represented visually\n"
        "- Include color scheme suggestions\n"
        "- Specify composition preferences\n\n"
        "Format: Single paragraph, detailed description"
    )


def fallback_image_prompt(title: str, keywords: str) -> str:
    return (
        f'Create a professional, abstract cover image for a research paper titled "{title}" '
        f"with keywords {keywords}. The image should be modern, clean, and suitable for a "
        "podcast cover."
    )


_AUTHOR_SPLIT = re.compile(r"\s*(?:;|,|\band\b|&)\s*", re.IGNORECASE)
# With semicolons present, commas belong to "Last, First" names
_AUTHOR_SPLIT_SEMICOLON = re.compile(r"\s*(?:;|\band\b|&)\s*", re.IGNORECASE)


def parse_authors(authors: str) -> list[str]:
    """Split a free-text author field into names."""
    pattern = _AUTHOR_SPLIT_SEMICOLON if ";" in authors else _AUTHOR_SPLIT
    return [name.strip() for name in pattern.split(authors) if name and name.strip()]


def author_instruction(authors: str) -> str:
    names = parse_authors(authors)
    if not names:
        return "The authors are not known; do not invent or mention author names."
    if len(names) == 1:
        return f"There is one author. Name the author: {names[0]}."
    if len(names) == 2:
        return f"There are exactly two authors. Name both authors: {names[0]} and {names[1]}."
    return (
        f"There are {len(names)} authors. Name only the lead author, {names[0]}, and refer to the "
        'others as "colleagues" or "co-authors". Do not list the other authors by name.'
    )


def script_message(
    title: str,
    abstract: str,
    authors: str,
    keywords: str,
    paper_text: str,
    min_chars: int = 6000,
    max_chars: int = 7000,
) -> str:
    return (
        f"Create a natural-sounding podcast script (between {min_chars}-{max_chars} characters) "
        "for the following research paper:\n"
        f"Title: {title}\n"
        f"Abstract: {abstract}\n"
        f"Authors: {authors}\n"
        f"Keywords: {keywords}\n\n"
        "Full Paper Text:\n"
        f"{paper_text}\n\n"
        "Guidelines for the script:\n"
        f'1. Start with a professional welcome: "{OPENING_LINE}"\n'
        "2. Introduce the paper and authors in a clear, objective manner.\n"
        f"   Author instruction: {author_instruction(authors)}\n"
        "3. Explain the research area using precise, accessible language\n"
        "4. Present the research findings in a flowing narrative without section headers\n"
        "5. Use natural transitions between topics\n"
        "6. Explain any technical terms or abbreviations the first time they appear\n"
        "7. Never read abbreviations in parentheses - use the full terms\n"
        "8. End with a balanced conclusion that summarizes key findings\n"
        "9. Close with a measured assessment of the research's implications\n\n"
        "Remember:\n"
        f"- The script should be between {min_chars}-{max_chars} characters total "
        "for a 5-7 minute podcast\n"
        "- Make it sound like a professional host speaking naturally, not reading from an "
        "academic paper\n"
        "- Avoid sensational language, intense adjectives, or hyperbolic claims\n"
        f"- Never use words like {_quoted_denylist()}, or similar hyperbolic terms\n"
        "- Present findings in a balanced, evidence-based manner\n"
        "- If you need to emphasize importance, use specific data or evidence rather than "
        "intense adjectives"
    )


def find_hyperbole(script: str) -> list[str]:
    """Denylisted words present in ``script``, in denylist order."""
    lowered = script.lower()
    return [word for word in HYPERBOLE_DENYLIST if re.search(rf"\b{word}\b", lowered)]
