from .models import SearchResult, VocabularyPair, PracticeRequest, PracticeContent, PracticeSource, PracticeResponse, LanguageInfoRequest, LanguageInfoResponse, RoleEnum, ChatMessage, AssistantRequest, AssistantResponse, UserPreferences, UserDataSummary, ErrorResponse

__all__ = ['SearchResult', 'VocabularyPair', 'PracticeRequest', 'PracticeContent', 'PracticeSource', 'PracticeResponse', 'LanguageInfoRequest', 'LanguageInfoResponse', 'RoleEnum', 'ChatMessage', 'AssistantRequest', 'AssistantResponse', 'UserPreferences',
           'UserDataSummary', 'ErrorResponse']
