import bedrock_service
import db_service
from models import *
from utils import logging


def build_system_prompt(preferences: UserPreferences, user_data: UserDataSummary, current_page: str = None) -> str:
    learned_context = ""
    if preferences.learned_facts:
        facts = "\n".join(f"{key}: {value}" for key, value in preferences.learned_facts.items())
        learned_context = f"WHAT YOU'VE LEARNED ABOUT THIS USER:\n{facts}\n"

    onboarding = "" if preferences.has_completed_onboarding else bedrock_service.load_prompt_template("assistant_onboarding")

    return bedrock_service.load_prompt_template("assistant_system").format(
        app_knowledge=bedrock_service.load_prompt_template("assistant_app_knowledge"),
        words_count=user_data.wordsCount,
        recent_words=", ".join(user_data.recentWords) if user_data.recentWords else "None yet",
        learned_context=learned_context,
        current_page=current_page or "Unknown",
        onboarding=onboarding,
    )


def next_usage_patterns(usage_patterns: dict, current_page: str = None) -> dict:
    page_key = f"page_{current_page}_count"
    return {
        **usage_patterns,
        "last_page": current_page,
        "total_interactions": int(usage_patterns.get("total_interactions", 0)) + 1,
        page_key: int(usage_patterns.get(page_key, 0)) + 1,
    }


def ask(user_id: str, request: AssistantRequest) -> AssistantResponse:
    logging.info(f"Assistant message for user {user_id} in conversation {request.conversationId}")

    history = db_service.get_conversation_history(user_id, request.conversationId)
    preferences = db_service.get_preferences(user_id)
    user_data = db_service.get_user_data_summary(user_id)

    system_prompt = build_system_prompt(preferences, user_data, request.currentPage)
    user_message = ChatMessage(role=RoleEnum.USER, content=request.message)
    reply = bedrock_service.chat(system_prompt, history + [user_message])

    db_service.save_messages(
        user_id,
        request.conversationId,
        [user_message, ChatMessage(role=RoleEnum.ASSISTANT, content=reply)],
        page=request.currentPage,
    )
    db_service.update_usage_patterns(user_id, next_usage_patterns(preferences.usage_patterns, request.currentPage))

    return AssistantResponse(message=reply, conversationId=request.conversationId)
