from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from .catalog import Provider, SchemaKind
from .claude_client import ClaudeClient
from .domain import ProviderReply, parse_provider
from .errors import ProviderError
from .gemini_client import BackendOutput, GeminiClient
from .settings import Settings

logger = logging.getLogger(__name__)


MOCK_TOKENS_USED = 100

# Values shipped in sample .env files; treated the same as a missing key
PLACEHOLDER_CREDENTIALS = {
    "your_gemini_api_key_here",
    "your_claude_api_key_here",
    "your_api_key_here",
    "your-api-key",
    "placeholder",
    "changeme",
    "change-me",
    "none",
    "null",
}


def is_configured_credential(value: Optional[str]) -> bool:
    if not value or not value.strip():
        return False
    return value.strip().lower() not in PLACEHOLDER_CREDENTIALS


class GenerationBackend(Protocol):
    async def generate(self, prompt: str) -> BackendOutput: ...

    async def aclose(self) -> None: ...


# ---- Offline mock ----

MOCK_DOCUMENTS: Dict[str, Dict[str, Any]] = {
    "vocabulary": {
        "title": "Korean Greetings",
        "description": "Essential greetings for everyday situations.",
        "mainContent": {
            "introduction": "Greetings change with the listener and the situation in Korean.",
            "keyPoints": [
                "안녕하세요 is the standard polite greeting.",
                "안녕 is used only with close friends or younger people.",
                "감사합니다 is the formal way to say thank you.",
            ],
            "examples": [
                {"text": "안녕하세요, 만나서 반갑습니다.", "translation": "Hello, nice to meet you.", "note": "annyeonghaseyo"},
                {"text": "감사합니다.", "translation": "Thank you.", "note": "gamsahamnida"},
            ],
        },
        "exercises": [
            {
                "question": "Which greeting is polite enough for a teacher?",
                "options": ["안녕", "안녕하세요", "야", "잘 가"],
                "correctAnswerIndex": 1,
                "explanation": "안녕하세요 is the polite form.",
            }
        ],
        "additionalNotes": ["Bow slightly when greeting someone older."],
    },
    "reading": {
        "title": "봄꽃 이야기",
        "description": "A short reading passage about spring flowers in Korea.",
        "mainContent": {
            "introduction": "봄이 오면 한국의 산과 공원에 꽃이 핍니다. 사람들은 벚꽃을 보러 가족과 함께 소풍을 갑니다. "
            "개나리와 진달래도 많이 볼 수 있습니다.",
            "keyPoints": ["봄 means spring.", "꽃이 피다 means flowers bloom.", "소풍 means picnic."],
            "examples": [{"text": "벚꽃이 예뻐요.", "translation": "The cherry blossoms are pretty."}],
        },
        "exercises": [
            {
                "question": "What do people go to see in spring?",
                "options": ["Snow", "Cherry blossoms", "Autumn leaves", "The sea"],
                "correctAnswerIndex": 1,
                "explanation": "The passage says people go to see 벚꽃 (cherry blossoms).",
            }
        ],
        "additionalNotes": ["Read the passage aloud twice."],
    },
    "questions": {
        "title": "Spring Passage Questions",
        "questions": [
            {"type": "multiple-choice", "question": "Which flower is mentioned first?", "answerSpace": 1, "points": 5},
            {"type": "short-answer", "question": "Who do people go on picnics with?", "answerSpace": 2, "points": 5},
            {"type": "essay", "question": "Describe spring where you live.", "answerSpace": 6, "points": 10},
        ],
    },
    "answers": {
        "title": "Spring Passage Answer Key",
        "answers": [
            {
                "questionNumber": 1,
                "correctAnswer": "벚꽃 (cherry blossoms)",
                "explanation": "It is the first flower named in the passage.",
                "gradingCriteria": ["Names the flower correctly"],
                "tips": "Scan the first sentences for flower names.",
            },
            {
                "questionNumber": 2,
                "correctAnswer": "With their family",
                "explanation": "The passage says 가족과 함께.",
                "gradingCriteria": ["Mentions family"],
                "tips": "함께 means together.",
            },
        ],
    },
    "vocabulary-analysis": {
        "title": "Spring Vocabulary Analysis",
        "vocabularyList": [
            {
                "word": "피다",
                "meaning": "to bloom",
                "synonyms": ["개화하다"],
                "antonyms": ["지다"],
                "difficultyStars": 2,
                "example": "꽃이 피었어요.",
            },
            {
                "word": "소풍",
                "meaning": "picnic, outing",
                "synonyms": ["나들이"],
                "antonyms": [],
                "difficultyStars": 1,
                "example": "주말에 소풍을 가요.",
            },
        ],
    },
}

# Checked in order against the task line; the first match wins
MOCK_KEYWORDS: List[Tuple[str, str]] = [
    ("answer key", SchemaKind.ANSWERS.value),
    ("question sheet", SchemaKind.QUESTIONS.value),
    ("vocabulary analysis", SchemaKind.VOCABULARY_ANALYSIS.value),
    ("reading passage", "reading"),
    ("vocabulary", "vocabulary"),
]


def select_mock_document(prompt: str) -> str:
    task_line = (prompt or "").strip().split("\n", 1)[0].lower()
    for keyword, key in MOCK_KEYWORDS:
        if keyword in task_line:
            return key
    return "vocabulary"


class MockBackend:
    """Deterministic network-free stand-in used when a provider is unavailable."""

    async def generate(self, prompt: str) -> BackendOutput:
        key = select_mock_document(prompt)
        return BackendOutput(text=json.dumps(MOCK_DOCUMENTS[key], ensure_ascii=False), usage=MOCK_TOKENS_USED)

    async def aclose(self) -> None:
        return None


# ---- Client wiring ----


@dataclass
class ProviderClients:
    gemini: Optional[GenerationBackend] = None
    claude: Optional[GenerationBackend] = None

    def get(self, provider: Provider) -> Optional[GenerationBackend]:
        if provider is Provider.GEMINI:
            return self.gemini
        if provider is Provider.CLAUDE:
            return self.claude
        raise AssertionError(f"unhandled provider {provider}")

    async def aclose(self) -> None:
        for backend in (self.gemini, self.claude):
            if backend is None:
                continue
            try:
                await backend.aclose()
            except Exception:
                logger.exception("Failed to close provider backend")


BACKEND_FACTORIES: Dict[Provider, Tuple[str, Callable[[Settings], GenerationBackend]]] = {
    Provider.GEMINI: ("gemini_api_key", lambda cfg: GeminiClient(config=cfg)),
    Provider.CLAUDE: ("claude_api_key", lambda cfg: ClaudeClient(config=cfg)),
}


def build_provider_clients(config: Settings) -> ProviderClients:
    """Build live backends for every provider with a usable credential.

    Missing or placeholder credentials, and backends that fail to initialize,
    leave the slot empty so requests for that provider get the mock reply.
    """
    clients = ProviderClients()
    for provider in Provider:
        key_field, factory = BACKEND_FACTORIES[provider]
        if not is_configured_credential(getattr(config, key_field)):
            logger.info("%s credential not configured; using offline mock", provider.value)
            continue
        try:
            backend = factory(config)
        except Exception as exc:
            logger.warning("%s client failed to initialize (%s); using offline mock", provider.value, exc)
            continue
        setattr(clients, provider.value, backend)
    return clients


class ProviderAdapter:
    def __init__(self, clients: Optional[ProviderClients] = None, mock: Optional[GenerationBackend] = None) -> None:
        self.clients = clients or ProviderClients()
        self.mock = mock or MockBackend()

    async def invoke(self, provider: Any, prompt: str) -> ProviderReply:
        provider = parse_provider(provider)
        backend = self.clients.get(provider)
        if backend is None:
            out = await self.mock.generate(prompt)
            logger.info("Mock reply for %s (no live backend)", provider.value)
            return ProviderReply(text=out.text, provider=provider, tokens_used=out.usage, mock=True)
        try:
            out = await backend.generate(prompt)
        except Exception as exc:
            logger.error("%s API error: %s", provider.value, exc)
            raise ProviderError(provider.value, str(exc) or exc.__class__.__name__) from exc
        return ProviderReply(text=out.text, provider=provider, tokens_used=out.usage, mock=False)

    def status(self) -> Dict[str, Dict[str, Any]]:
        # Credential presence only; a live test call would cost tokens
        checked_at = datetime.now(timezone.utc).isoformat()
        status: Dict[str, Dict[str, Any]] = {}
        for provider in Provider:
            available = self.clients.get(provider) is not None
            entry: Dict[str, Any] = {"available": available}
            if available:
                entry["lastCheckedAt"] = checked_at
            status[provider.value] = entry
        return status

    async def aclose(self) -> None:
        await self.clients.aclose()
