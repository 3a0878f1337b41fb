import boto3
import os
import json
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import HTTPException
from models import ChatMessage
from utils import logging

# Optional: store model ID in env vars or config
BEDROCK_MODEL_ID = os.getenv("BEDROCK_MODEL_ID", "amazon.nova-lite-v1:0")
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
PROMPT_DIR = os.getenv("PROMPT_DIR", os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "resources", "prompts"))

bedrock = boto3.client("bedrock-runtime", region_name=AWS_REGION)


def load_prompt_template(name: str) -> str:
    template_path = os.path.join(PROMPT_DIR, f"{name}.txt")
    try:
        with open(template_path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError as e:
        logging.error(f"Error loading prompt template from {template_path}: {str(e)}")
        raise


def chat(system_prompt: str, messages: list[ChatMessage], temperature=0.7, max_tokens=1000) -> str:
    logging.info(f"Sending chat with {len(messages)} messages to Bedrock")
    try:
        raw_output = call_bedrock(system_prompt, messages, temperature, max_tokens)
        return raw_output["output"]["message"]["content"][0]["text"].strip()
    except (BotoCoreError, ClientError, KeyError, IndexError, json.JSONDecodeError) as e:
        logging.error(f"AI request failed: {str(e)}")
        raise HTTPException(status_code=502, detail="AI request failed")


def call_bedrock(system_prompt: str, messages: list[ChatMessage], temperature=0.7, max_tokens=1000):
    try:
        logging.debug(f"Calling Bedrock with system prompt: {system_prompt}")

        response = bedrock.invoke_model(
            modelId=BEDROCK_MODEL_ID,
            body=bytes(
                json.dumps({
                    "system": [
                        {"text": system_prompt}
                    ],
                    "messages": [
                        {
                            "role": m.role.value,
                            "content": [
                                {"text": m.content}
                            ]
                        }
                        for m in messages
                    ],
                    "inferenceConfig": {
                        "maxTokens": max_tokens,
                        "stopSequences": [],
                        "temperature": temperature,
                        "topP": 0.95
                    }
                }),
                "utf-8"
            ),
            contentType="application/json",
            accept="application/json"
        )

        response_body = response["body"].read().decode("utf-8")
        result = json.loads(response_body)

        logging.debug(f"Received response from Bedrock: {result}")

        return result
    except Exception as e:
        logging.exception(f"Error calling Bedrock model: {str(e)}")
        raise
