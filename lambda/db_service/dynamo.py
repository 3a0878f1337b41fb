import time
import uuid

import boto3
from botocore.exceptions import ClientError
from models import *
import os
from fastapi import HTTPException
from boto3.dynamodb.conditions import Key
from utils import logging
from datetime import datetime, timezone

HISTORY_LIMIT = 20
RECENT_WORDS_LIMIT = 5

dynamodb = boto3.resource("dynamodb", region_name=os.getenv("AWS_REGION", "us-east-1"))
vocabulary_table_name = os.getenv("VOCABULARY_TABLE", "linguavault_vocabulary_words")
vocabulary_table = dynamodb.Table(vocabulary_table_name)
memory_table_name = os.getenv("ASSISTANT_MEMORY_TABLE", "linguavault_assistant_memory")
memory_table = dynamodb.Table(memory_table_name)
preferences_table_name = os.getenv("ASSISTANT_PREFERENCES_TABLE", "linguavault_assistant_preferences")
preferences_table = dynamodb.Table(preferences_table_name)


def conversation_key(user_id: str, conversation_id: str) -> str:
    return f"{user_id}#{conversation_id}"


def get_conversation_history(user_id: str, conversation_id: str, limit: int = HISTORY_LIMIT) -> list[ChatMessage]:
    logging.info(f"Loading conversation {conversation_id} for user {user_id}")

    try:
        # Newest first so the limit keeps the latest messages
        response = memory_table.query(
            KeyConditionExpression=Key("conversation_key").eq(conversation_key(user_id, conversation_id)),
            ScanIndexForward=False,
            Limit=limit
        )
        items = list(reversed(response.get("Items", [])))

        return [ChatMessage(role=item["role"], content=item["content"]) for item in items]
    except ClientError as e:
        logging.error(f"Error loading conversation history: {str(e)}")
        raise HTTPException(status_code=500, detail="Error loading conversation history")


def save_messages(user_id: str, conversation_id: str, messages: list[ChatMessage], page: str = None):
    logging.info(f"Saving {len(messages)} messages to conversation {conversation_id} for user {user_id}")

    # millisecond sort key, bumped per message to keep the exchange ordered
    created_at = int(time.time() * 1000)
    try:
        with memory_table.batch_writer() as batch:
            for offset, message in enumerate(messages):
                item = {
                    "conversation_key": conversation_key(user_id, conversation_id),
                    "created_at": created_at + offset,
                    "message_id": str(uuid.uuid4()),
                    "user_id": user_id,
                    "conversation_id": conversation_id,
                    "role": message.role.value,
                    "content": message.content,
                }
                if message.role == RoleEnum.USER and page:
                    item["metadata"] = {"page": page}
                batch.put_item(Item=item)
    except ClientError as e:
        logging.error(f"Error saving messages: {str(e)}")
        raise HTTPException(status_code=500, detail="Error saving messages")


def get_preferences(user_id: str) -> UserPreferences:
    logging.info(f"Loading assistant preferences for user {user_id}")

    try:
        response = preferences_table.get_item(Key={"user_id": user_id})
        item = response.get("Item")
        if not item:
            return UserPreferences()

        return UserPreferences(
            learned_facts={k: str(v) for k, v in (item.get("learned_facts") or {}).items()},
            usage_patterns=item.get("usage_patterns") or {},
            has_completed_onboarding=bool(item.get("has_completed_onboarding", False)),
        )
    except ClientError as e:
        logging.error(f"Error loading preferences: {str(e)}")
        raise HTTPException(status_code=500, detail="Error loading preferences")


def update_usage_patterns(user_id: str, usage_patterns: dict):
    logging.info(f"Updating usage patterns for user {user_id}")

    try:
        preferences_table.update_item(
            Key={"user_id": user_id},
            UpdateExpression="SET #usage_patterns = :usage_patterns, #last_interaction = :last_interaction",
            ExpressionAttributeNames={
                "#usage_patterns": "usage_patterns",
                "#last_interaction": "last_interaction"
            },
            ExpressionAttributeValues={
                ":usage_patterns": usage_patterns,
                ":last_interaction": datetime.now(timezone.utc).isoformat()
            }
        )
    except ClientError as e:
        logging.error(f"Error updating usage patterns: {str(e)}")
        raise HTTPException(status_code=500, detail="Error updating usage patterns")


def get_user_data_summary(user_id: str, limit: int = RECENT_WORDS_LIMIT) -> UserDataSummary:
    logging.info(f"Summarizing vocabulary for user {user_id}")

    try:
        query_kwargs = {"KeyConditionExpression": Key("user_id").eq(user_id)}
        items = []
        # Query pages are capped at 1 MB
        while True:
            response = vocabulary_table.query(**query_kwargs)
            items.extend(response.get("Items", []))
            if "LastEvaluatedKey" not in response:
                break
            query_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

        recent = sorted(items, key=lambda item: int(item.get("created_at") or 0), reverse=True)[:limit]
        recent_words = []
        for item in recent:
            meanings = item.get("meanings") or []
            translation = meanings[0].get("translation") if meanings else None
            recent_words.append(f'"{item["word"]}" ({translation})' if translation else f'"{item["word"]}"')

        return UserDataSummary(wordsCount=len(items), recentWords=recent_words)
    except ClientError as e:
        logging.error(f"Error summarizing vocabulary: {str(e)}")
        raise HTTPException(status_code=500, detail="Error summarizing vocabulary")
