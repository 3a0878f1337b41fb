from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class SearchResult(BaseModel):
    title: str
    pageId: Optional[int] = None

class VocabularyPair(BaseModel):
    native: str
    translation: str

class PracticeRequest(BaseModel):
    languageName: Optional[str] = None
    languageCode: Optional[str] = None

class PracticeContent(BaseModel):
    vocabulary: list[VocabularyPair] = []

class PracticeSource(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None

class PracticeResponse(BaseModel):
    practice: PracticeContent = Field(default_factory=PracticeContent)
    source: PracticeSource = Field(default_factory=PracticeSource)
    message: Optional[str] = None

class LanguageInfoRequest(BaseModel):
    languageName: Optional[str] = None
    languageCode: Optional[str] = None

class LanguageInfoResponse(BaseModel):
    success: bool = True
    languageInfo: str
    languageName: str
    languageCode: Optional[str] = None

class RoleEnum(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"

class ChatMessage(BaseModel):
    role: RoleEnum
    content: str

class AssistantRequest(BaseModel):
    message: str
    conversationId: str
    currentPage: Optional[str] = None

class AssistantResponse(BaseModel):
    message: str
    conversationId: str

class UserPreferences(BaseModel):
    learned_facts: dict[str, str] = {}
    usage_patterns: dict = {}
    has_completed_onboarding: bool = False

class UserDataSummary(BaseModel):
    wordsCount: int = 0
    recentWords: list[str] = []

class ErrorResponse(BaseModel):
    error: str
