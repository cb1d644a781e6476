from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)


SCHEMA_CATALOG_VERSION = "2025.1"
AGE_CATALOG_VERSION = "2025.1"


class Provider(str, Enum):
    GEMINI = "gemini"
    CLAUDE = "claude"


class ContentType(str, Enum):
    VOCABULARY = "vocabulary"
    GRAMMAR = "grammar"
    READING = "reading"
    QUIZ = "quiz"
    QUESTIONS = "questions"
    ANSWERS = "answers"
    VOCABULARY_ANALYSIS = "vocabulary-analysis"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class TargetAge(str, Enum):
    CHILD = "child"
    TEEN = "teen"
    ADULT = "adult"
    SENIOR = "senior"
    ELEM1 = "elem1"
    ELEM2 = "elem2"
    ELEM3 = "elem3"
    ELEM4 = "elem4"
    ELEM5 = "elem5"
    ELEM6 = "elem6"
    MIDDLE1 = "middle1"
    MIDDLE2 = "middle2"
    MIDDLE3 = "middle3"
    HIGH1 = "high1"
    HIGH2 = "high2"
    HIGH3 = "high3"


class SchemaKind(str, Enum):
    DEFAULT = "default"
    VOCABULARY_ANALYSIS = "vocabulary-analysis"
    QUESTIONS = "questions"
    ANSWERS = "answers"


DEFAULT_CONTENT_TYPE = ContentType.VOCABULARY
DEFAULT_DIFFICULTY = Difficulty.INTERMEDIATE
DEFAULT_TARGET_AGE = TargetAge.ADULT
DEFAULT_TITLE = "Korean Learning Material"
DEFAULT_DESCRIPTION = "Learning material generated by AI."


def ensure_exhaustive(table: Dict[Any, Any], enum_cls: Type[Enum], name: str) -> None:
    missing = [member.value for member in enum_cls if member not in table]
    if missing:
        raise RuntimeError(f"{name} is missing entries for {missing}")


def _coerce(enum_cls: Type[Enum], value: Any, default: Enum) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    if value is not None:
        logger.debug("Unknown %s %r, using %s", enum_cls.__name__, value, default.value)
    return default


def coerce_content_type(value: Any) -> ContentType:
    return _coerce(ContentType, value, DEFAULT_CONTENT_TYPE)


def coerce_difficulty(value: Any) -> Difficulty:
    return _coerce(Difficulty, value, DEFAULT_DIFFICULTY)


def coerce_target_age(value: Any) -> TargetAge:
    return _coerce(TargetAge, value, DEFAULT_TARGET_AGE)


# ---- Document shapes ----


class Example(BaseModel):
    text: str
    translation: Optional[str] = None
    note: Optional[str] = None


class MainContent(BaseModel):
    introduction: str = ""
    keyPoints: List[str] = Field(default_factory=list)
    examples: List[Example] = Field(default_factory=list)


class Exercise(BaseModel):
    question: str
    options: List[str] = Field(default_factory=list)
    correctAnswerIndex: int = Field(ge=0)
    explanation: str = ""


class DefaultDocument(BaseModel):
    title: str
    description: str = ""
    mainContent: MainContent = Field(default_factory=MainContent)
    exercises: List[Exercise] = Field(default_factory=list)
    additionalNotes: List[str] = Field(default_factory=list)


class VocabularyEntry(BaseModel):
    word: str
    meaning: str
    synonyms: List[str] = Field(default_factory=list)
    antonyms: List[str] = Field(default_factory=list)
    difficultyStars: int = Field(ge=1, le=5)
    example: str = ""


class VocabularyAnalysisDocument(BaseModel):
    title: str
    vocabularyList: List[VocabularyEntry] = Field(default_factory=list)


class QuestionItem(BaseModel):
    type: str
    question: str
    answerSpace: int = Field(ge=0)
    points: int = Field(ge=0)


class QuestionsDocument(BaseModel):
    title: str
    questions: List[QuestionItem] = Field(default_factory=list)


class AnswerItem(BaseModel):
    questionNumber: int
    correctAnswer: str
    explanation: str = ""
    gradingCriteria: List[str] = Field(default_factory=list)
    tips: str = ""


class AnswersDocument(BaseModel):
    title: str
    answers: List[AnswerItem] = Field(default_factory=list)


SCHEMA_MODELS: Dict[SchemaKind, Type[BaseModel]] = {
    SchemaKind.DEFAULT: DefaultDocument,
    SchemaKind.VOCABULARY_ANALYSIS: VocabularyAnalysisDocument,
    SchemaKind.QUESTIONS: QuestionsDocument,
    SchemaKind.ANSWERS: AnswersDocument,
}

SCHEMA_KIND_BY_CONTENT_TYPE: Dict[ContentType, SchemaKind] = {
    ContentType.VOCABULARY: SchemaKind.DEFAULT,
    ContentType.GRAMMAR: SchemaKind.DEFAULT,
    ContentType.READING: SchemaKind.DEFAULT,
    ContentType.QUIZ: SchemaKind.DEFAULT,
    ContentType.QUESTIONS: SchemaKind.QUESTIONS,
    ContentType.ANSWERS: SchemaKind.ANSWERS,
    ContentType.VOCABULARY_ANALYSIS: SchemaKind.VOCABULARY_ANALYSIS,
}

# Literal examples shown to the model. Placeholder strings describe each field.
SCHEMA_EXAMPLES: Dict[SchemaKind, Dict[str, Any]] = {
    SchemaKind.DEFAULT: {
        "title": "Title of the learning material",
        "description": "A short description of the material",
        "mainContent": {
            "introduction": "Introductory explanation",
            "keyPoints": ["Key point 1", "Key point 2", "Key point 3"],
            "examples": [
                {
                    "text": "Korean example sentence",
                    "translation": "English translation",
                    "note": "Usage note (romanization for beginners)",
                }
            ],
        },
        "exercises": [
            {
                "question": "Exercise question",
                "options": ["Option 1", "Option 2", "Option 3", "Option 4"],
                "correctAnswerIndex": 0,
                "explanation": "Why the answer is correct",
            }
        ],
        "additionalNotes": ["Extra study tip or caution"],
    },
    SchemaKind.VOCABULARY_ANALYSIS: {
        "title": "Title of the vocabulary analysis",
        "vocabularyList": [
            {
                "word": "Korean word",
                "meaning": "Meaning in English",
                "synonyms": ["Synonym"],
                "antonyms": ["Antonym"],
                "difficultyStars": 3,
                "example": "Example sentence using the word",
            }
        ],
    },
    SchemaKind.QUESTIONS: {
        "title": "Title of the question sheet",
        "questions": [
            {
                "type": "short-answer",
                "question": "Question text",
                "answerSpace": 3,
                "points": 10,
            }
        ],
    },
    SchemaKind.ANSWERS: {
        "title": "Title of the answer key",
        "answers": [
            {
                "questionNumber": 1,
                "correctAnswer": "Model answer",
                "explanation": "Why this answer is correct",
                "gradingCriteria": ["Criterion for full marks"],
                "tips": "Advice for the learner",
            }
        ],
    },
}


def schema_kind_for(content_type: ContentType) -> SchemaKind:
    return SCHEMA_KIND_BY_CONTENT_TYPE[coerce_content_type(content_type)]


def schema_example(kind: SchemaKind) -> Dict[str, Any]:
    # Deep copy so callers can never mutate the catalog
    return json.loads(json.dumps(SCHEMA_EXAMPLES[kind]))


def schema_example_json(kind: SchemaKind) -> str:
    return json.dumps(SCHEMA_EXAMPLES[kind], indent=2, ensure_ascii=False)


def conforms(kind: SchemaKind, document: Any) -> bool:
    """Advisory shape check. Never used to reject a reply."""
    try:
        SCHEMA_MODELS[kind].model_validate(document)
    except PydanticValidationError:
        return False
    return True


# ---- Descriptor tables ----

DIFFICULTY_GUIDES: Dict[Difficulty, Dict[str, Any]] = {
    Difficulty.BEGINNER: {
        "label": "Beginner",
        "description": "Can read Hangul and knows about 500 basic words",
        "features": ["Romanization included", "Easy vocabulary", "Simple sentence structure"],
    },
    Difficulty.INTERMEDIATE: {
        "label": "Intermediate",
        "description": "Can hold everyday conversations and knows basic grammar",
        "features": ["Practical expressions", "Varied grammar", "Cultural context"],
    },
    Difficulty.ADVANCED: {
        "label": "Advanced",
        "description": "Understands complex sentences and can tell nuances apart",
        "features": ["Advanced vocabulary", "Complex grammar", "Abstract concepts"],
    },
}

_LIFE_STAGE_GUIDES: Dict[TargetAge, Dict[str, Any]] = {
    TargetAge.CHILD: {
        "label": "Child",
        "description": "Fun, easy examples with picture or game elements",
        "features": ["Play-based", "Visual elements", "Repetition"],
    },
    TargetAge.TEEN: {
        "label": "Teen",
        "description": "Examples about school life and friendships",
        "features": ["Classroom friendly", "Peer culture", "Practical conversation"],
    },
    TargetAge.ADULT: {
        "label": "Adult",
        "description": "Practical examples from work and social life",
        "features": ["Business Korean", "Formal expressions", "Social culture"],
    },
    TargetAge.SENIOR: {
        "label": "Senior",
        "description": "Slow, detailed explanations with plenty of repetition",
        "features": ["Systematic explanation", "Ample practice", "Reinforcement"],
    },
}


def _grade_guide(school: str, grade: int, description: str) -> Dict[str, Any]:
    return {
        "label": f"{school} grade {grade}",
        "description": description,
        "features": ["Curriculum aligned", f"{school} school reading level"],
    }


def _build_age_guides() -> Dict[TargetAge, Dict[str, Any]]:
    guides = dict(_LIFE_STAGE_GUIDES)
    for grade in range(1, 7):
        tone = "short sentences and familiar topics" if grade <= 3 else "everyday topics with some new words"
        guides[TargetAge(f"elem{grade}")] = _grade_guide(
            "Elementary", grade, f"Elementary school grade {grade} learners; {tone}"
        )
    for grade in range(1, 4):
        guides[TargetAge(f"middle{grade}")] = _grade_guide(
            "Middle", grade, f"Middle school grade {grade} (overall grade {grade + 6}); school and hobby topics"
        )
    for grade in range(1, 4):
        guides[TargetAge(f"high{grade}")] = _grade_guide(
            "High", grade, f"High school grade {grade} (overall grade {grade + 9}); academic and social topics"
        )
    return guides


AGE_GUIDES: Dict[TargetAge, Dict[str, Any]] = _build_age_guides()

SAMPLE_PROMPTS: Dict[ContentType, List[str]] = {
    ContentType.VOCABULARY: [
        "Make vocabulary material about Korean greetings",
        "Organize Korean words related to food",
        "Create vocabulary material about traditional Korean culture",
    ],
    ContentType.GRAMMAR: [
        "Explain the difference between formal and casual speech",
        "Explain how to use the particles 은/는 and 이/가",
        "Explain how tense is expressed in Korean",
    ],
    ContentType.READING: [
        "Write a reading passage about the four seasons in Korea",
        "Write an introduction to traditional Korean food",
        "Write about the daily life of a Korean university student",
    ],
    ContentType.QUIZ: [
        "Make a quiz on basic Korean vocabulary",
        "Make a quiz that checks understanding of Korean culture",
        "Make questions that test Korean grammar",
    ],
    ContentType.QUESTIONS: [
        "Write comprehension questions for a passage about Seollal",
    ],
    ContentType.ANSWERS: [
        "Write the answer key for a worksheet on Korean particles",
    ],
    ContentType.VOCABULARY_ANALYSIS: [
        "Analyze the key words of a short text about Korean markets",
    ],
}


def catalog_summary() -> Dict[str, Any]:
    return {
        "version": SCHEMA_CATALOG_VERSION,
        "ageCatalogVersion": AGE_CATALOG_VERSION,
        "providers": [p.value for p in Provider],
        "contentTypes": [
            {"value": ct.value, "schema": SCHEMA_KIND_BY_CONTENT_TYPE[ct].value} for ct in ContentType
        ],
        "difficultyGuide": {d.value: DIFFICULTY_GUIDES[d] for d in Difficulty},
        "ageGuide": {a.value: AGE_GUIDES[a] for a in TargetAge},
        "samplePrompts": {ct.value: SAMPLE_PROMPTS[ct] for ct in ContentType},
    }


ensure_exhaustive(SCHEMA_MODELS, SchemaKind, "SCHEMA_MODELS")
ensure_exhaustive(SCHEMA_EXAMPLES, SchemaKind, "SCHEMA_EXAMPLES")
ensure_exhaustive(SCHEMA_KIND_BY_CONTENT_TYPE, ContentType, "SCHEMA_KIND_BY_CONTENT_TYPE")
ensure_exhaustive(DIFFICULTY_GUIDES, Difficulty, "DIFFICULTY_GUIDES")
ensure_exhaustive(AGE_GUIDES, TargetAge, "AGE_GUIDES")
ensure_exhaustive(SAMPLE_PROMPTS, ContentType, "SAMPLE_PROMPTS")
