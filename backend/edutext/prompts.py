from __future__ import annotations

from typing import Dict

from .catalog import (
    AGE_GUIDES,
    DIFFICULTY_GUIDES,
    ContentType,
    coerce_content_type,
    coerce_difficulty,
    coerce_target_age,
    ensure_exhaustive,
    schema_example_json,
    schema_kind_for,
)
from .domain import GenerationRequest


# The first line of each template is the task line the offline mock keys on.
BASE_PROMPTS: Dict[ContentType, str] = {
    ContentType.VOCABULARY: (
        "Create Korean vocabulary study material.\n"
        "Include definitions, example sentences, parts of speech and usage for each new word."
    ),
    ContentType.GRAMMAR: (
        "Create Korean grammar study material.\n"
        "Include a clear explanation of the rule, varied example sentences and common pitfalls."
    ),
    ContentType.READING: (
        "Create a Korean reading passage for language learners.\n"
        "Put the passage itself in mainContent.introduction and add comprehension exercises."
    ),
    ContentType.QUIZ: (
        "Create a Korean learning quiz.\n"
        "Use several question formats, each with a clear correct answer and explanation."
    ),
    ContentType.QUESTIONS: (
        "Create a question sheet for Korean learners.\n"
        "Mix question formats and give each question an answer space (in lines) and a point value."
    ),
    ContentType.ANSWERS: (
        "Create an answer key for a Korean learning worksheet.\n"
        "For every question give the correct answer, an explanation, grading criteria and a tip."
    ),
    ContentType.VOCABULARY_ANALYSIS: (
        "Create a vocabulary analysis table for Korean learners.\n"
        "For each word give its meaning, synonyms, antonyms, a 1-5 difficulty rating and an example."
    ),
}

ensure_exhaustive(BASE_PROMPTS, ContentType, "BASE_PROMPTS")

CLOSING_DIRECTIVE = (
    "IMPORTANT: Respond with valid JSON only. Put every explanation inside the JSON "
    "and write nothing before or after it."
)


def _length_directive(content_length: int) -> str:
    return (
        f"IMPORTANT: The reading passage in mainContent.introduction must be EXACTLY "
        f"{content_length} characters long. Count every character, including spaces and punctuation."
    )


def compile_prompt(request: GenerationRequest) -> str:
    """Render a request into the provider-agnostic instruction string.

    Pure: the same request always yields the same string for a given catalog
    version. Unknown content type, difficulty or age values fall back to the
    catalog defaults.
    """
    content_type = coerce_content_type(request.content_type)
    difficulty = coerce_difficulty(request.difficulty)
    target_age = coerce_target_age(request.target_age)

    sections = [
        BASE_PROMPTS[content_type],
        f'Learner request: "{request.prompt}"',
        "Settings:\n"
        f"- Difficulty: {difficulty.value} ({DIFFICULTY_GUIDES[difficulty]['description']})\n"
        f"- Target audience: {target_age.value} ({AGE_GUIDES[target_age]['description']})",
    ]
    if content_type is ContentType.READING:
        sections.append(_length_directive(request.content_length))
    sections.append(
        "Respond using exactly this JSON structure:\n\n"
        + schema_example_json(schema_kind_for(content_type))
    )
    sections.append(CLOSING_DIRECTIVE)
    return "\n\n".join(sections)
