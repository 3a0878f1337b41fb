from __future__ import annotations

import io
import json
from decimal import Decimal

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from botocore.exceptions import ClientError
from fastapi import HTTPException
from fastapi.testclient import TestClient
from starlette.requests import Request

import assistant_service
import bedrock_service
import db_service
import main
from bedrock_service import bedrock
from db_service import dynamo
from models import AssistantRequest, ChatMessage, RoleEnum, UserDataSummary, UserPreferences

USER = {"user_id": "user-1", "email": "a@example.org", "username": "alice"}


class FakeBatch:
    def __init__(self, table: "FakeTable") -> None:
        self.table = table

    def __enter__(self) -> "FakeBatch":
        return self

    def __exit__(self, *exc) -> None:
        return None

    def put_item(self, Item):
        self.table.items.append(Item)


class FakeTable:
    def __init__(self, items=None, item=None, error: str | None = None) -> None:
        self.items = list(items or [])
        self.item = item
        self.error = error
        self.queries: list[dict] = []
        self.updates: list[dict] = []

    def _maybe_fail(self):
        if self.error:
            raise ClientError({"Error": {"Code": self.error, "Message": "fail"}}, "Operation")

    def query(self, **kwargs):
        self._maybe_fail()
        self.queries.append(kwargs)
        items = list(self.items)
        if kwargs.get("ScanIndexForward") is False:
            items = sorted(items, key=lambda i: i["created_at"], reverse=True)
        if "Limit" in kwargs:
            items = items[: kwargs["Limit"]]
        return {"Items": items}

    def get_item(self, Key):
        self._maybe_fail()
        return {"Item": self.item} if self.item else {}

    def update_item(self, **kwargs):
        self._maybe_fail()
        self.updates.append(kwargs)

    def batch_writer(self):
        self._maybe_fail()
        return FakeBatch(self)


class FakeBedrock:
    def __init__(self, text: str = "Welcome!", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[dict] = []

    def invoke_model(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        body = {"output": {"message": {"content": [{"text": f"  {self.text}\n"}]}}}
        return {"body": io.BytesIO(json.dumps(body).encode("utf-8"))}


@pytest.fixture()
def client() -> TestClient:
    return TestClient(main.app, raise_server_exceptions=False)


@pytest.fixture()
def authenticated():
    main.app.dependency_overrides[main.get_current_user] = lambda: USER
    yield USER
    main.app.dependency_overrides.clear()


@pytest.fixture()
def tables(monkeypatch):
    memory = FakeTable()
    preferences = FakeTable(item={
        "user_id": "user-1",
        "learned_facts": {"favourite_language": "Ainu"},
        "usage_patterns": {"total_interactions": Decimal(2), "page_/practice_count": Decimal(1)},
        "has_completed_onboarding": True,
    })
    vocabulary = FakeTable(items=[
        {"user_id": "user-1", "word": "wakka", "created_at": Decimal(10), "meanings": [{"translation": "water"}]},
        {"user_id": "user-1", "word": "ape", "created_at": Decimal(20), "meanings": []},
    ])
    monkeypatch.setattr(dynamo, "memory_table", memory)
    monkeypatch.setattr(dynamo, "preferences_table", preferences)
    monkeypatch.setattr(dynamo, "vocabulary_table", vocabulary)
    return {"memory": memory, "preferences": preferences, "vocabulary": vocabulary}


def test_assistant_requires_claims(client):
    response = client.post("/ai-assistant", json={"message": "hi", "conversationId": "c1"})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_current_user_from_lambda_event():
    scope = {
        "type": "http",
        "aws.event": {"requestContext": {"authorizer": {"claims": {
            "sub": "user-1", "email": "a@example.org", "cognito:username": "alice",
        }}}},
    }

    assert main.get_current_user(Request(scope)) == USER


def test_assistant_round_trip(client, authenticated, tables, monkeypatch):
    fake = FakeBedrock("Try the Practice page!")
    monkeypatch.setattr(bedrock, "bedrock", fake)

    response = client.post(
        "/ai-assistant",
        json={"message": "What next?", "conversationId": "c1", "currentPage": "/practice"},
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Try the Practice page!", "conversationId": "c1"}

    body = json.loads(fake.calls[0]["body"].decode("utf-8"))
    system_prompt = body["system"][0]["text"]
    assert "favourite_language: Ainu" in system_prompt
    assert '"wakka" (water)' in system_prompt
    assert "Total words saved: 2" in system_prompt
    assert "CURRENT LOCATION: /practice" in system_prompt
    assert "ONBOARDING MODE" not in system_prompt
    assert body["messages"] == [{"role": "user", "content": [{"text": "What next?"}]}]

    stored = tables["memory"].items
    assert [(i["role"], i["content"]) for i in stored] == [("user", "What next?"), ("assistant", "Try the Practice page!")]
    assert stored[0]["metadata"] == {"page": "/practice"}
    assert "metadata" not in stored[1]
    assert stored[1]["created_at"] == stored[0]["created_at"] + 1

    update = tables["preferences"].updates[0]
    patterns = update["ExpressionAttributeValues"][":usage_patterns"]
    assert patterns["total_interactions"] == 3
    assert patterns["page_/practice_count"] == 2
    assert patterns["last_page"] == "/practice"


def test_assistant_bedrock_failure_is_502(client, authenticated, tables, monkeypatch):
    error = ClientError({"Error": {"Code": "ThrottlingException", "Message": "slow down"}}, "InvokeModel")
    monkeypatch.setattr(bedrock, "bedrock", FakeBedrock(error=error))

    response = client.post("/ai-assistant", json={"message": "hi", "conversationId": "c1"})

    assert response.status_code == 502
    assert response.json() == {"error": "AI request failed"}
    assert tables["memory"].items == []


def test_history_is_latest_messages_oldest_first(tables):
    tables["memory"].items = [
        {"created_at": n, "role": "user" if n % 2 else "assistant", "content": f"m{n}"} for n in range(1, 26)
    ]

    history = db_service.get_conversation_history("user-1", "c1")

    assert len(history) == 20
    assert history[0].content == "m6"
    assert history[-1] == ChatMessage(role=RoleEnum.USER, content="m25")
    assert tables["memory"].queries[0]["Limit"] == 20


def test_missing_preferences_default(tables):
    tables["preferences"].item = None

    assert db_service.get_preferences("user-2") == UserPreferences()


def test_user_data_summary_orders_recent_words(tables):
    summary = db_service.get_user_data_summary("user-1")

    assert summary == UserDataSummary(wordsCount=2, recentWords=['"ape"', '"wakka" (water)'])


def test_dynamo_errors_become_500(tables):
    tables["preferences"].error = "ResourceNotFoundException"

    with pytest.raises(HTTPException) as excinfo:
        db_service.get_preferences("user-1")

    assert excinfo.value.status_code == 500


def test_system_prompt_onboarding_for_new_user():
    prompt = assistant_service.build_system_prompt(UserPreferences(), UserDataSummary())

    assert "ONBOARDING MODE" in prompt
    assert "Recent words: None yet" in prompt
    assert "CURRENT LOCATION: Unknown" in prompt
    assert "WHAT YOU'VE LEARNED" not in prompt


def test_next_usage_patterns_starts_counters():
    assert assistant_service.next_usage_patterns({}, "/words") == {
        "last_page": "/words",
        "total_interactions": 1,
        "page_/words_count": 1,
    }


def test_ask_sends_history_before_new_message(monkeypatch):
    history = [ChatMessage(role=RoleEnum.USER, content="hello"), ChatMessage(role=RoleEnum.ASSISTANT, content="hi!")]
    sent = {}
    monkeypatch.setattr(db_service, "get_conversation_history", lambda user_id, conversation_id: history)
    monkeypatch.setattr(db_service, "get_preferences", lambda user_id: UserPreferences(has_completed_onboarding=True))
    monkeypatch.setattr(db_service, "get_user_data_summary", lambda user_id: UserDataSummary())
    monkeypatch.setattr(db_service, "save_messages", lambda *args, **kwargs: None)
    monkeypatch.setattr(db_service, "update_usage_patterns", lambda user_id, patterns: None)

    def fake_chat(system_prompt, messages):
        sent["messages"] = messages
        return "answer"

    monkeypatch.setattr(bedrock_service, "chat", fake_chat)

    result = assistant_service.ask("user-1", AssistantRequest(message="next?", conversationId="c9"))

    assert result.message == "answer"
    assert [m.content for m in sent["messages"]] == ["hello", "hi!", "next?"]


class PagedTable(FakeTable):
    def __init__(self, pages: list[list[dict]]) -> None:
        super().__init__()
        self.pages = pages

    def query(self, **kwargs):
        self.queries.append(kwargs)
        index = kwargs.get("ExclusiveStartKey", {}).get("page", 0)
        response = {"Items": self.pages[index]}
        if index + 1 < len(self.pages):
            response["LastEvaluatedKey"] = {"page": index + 1}
        return response


def test_user_data_summary_follows_query_pages(monkeypatch):
    pages = [
        [{"word": f"w{n}", "created_at": Decimal(n), "meanings": []} for n in range(0, 3)],
        [{"word": f"w{n}", "created_at": Decimal(n), "meanings": []} for n in range(3, 6)],
        [{"word": "w6", "created_at": Decimal(6), "meanings": [{"translation": "six"}]}],
    ]
    table = PagedTable(pages)
    monkeypatch.setattr(dynamo, "vocabulary_table", table)

    summary = db_service.get_user_data_summary("user-1")

    assert summary.wordsCount == 7
    assert summary.recentWords[0] == '"w6" (six)'
    assert [q.get("ExclusiveStartKey") for q in table.queries] == [None, {"page": 1}, {"page": 2}]
