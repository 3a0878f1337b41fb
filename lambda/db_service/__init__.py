from .dynamo import get_conversation_history, save_messages, get_preferences, update_usage_patterns, get_user_data_summary

__all__ = ['get_conversation_history', 'save_messages', 'get_preferences', 'update_usage_patterns', 'get_user_data_summary']
