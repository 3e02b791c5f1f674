import json

from surfer.src.agent.conversation import ConversationStore
from surfer.src.agent.models import ChatMessage


def test_new_store_starts_with_system_turn(tmp_path):
    store = ConversationStore(tmp_path / "memory.json", "rules")
    assert [(m.role, m.content) for m in store.messages] == [("system", "rules")]
    assert len(store) == 1


def test_append_rewrites_file_every_time(tmp_path):
    path = tmp_path / "memory.json"
    store = ConversationStore(path, "rules")

    store.append(ChatMessage(role="user", content="Task: one"))
    assert len(json.loads(path.read_text(encoding="utf-8"))) == 2

    store.append(ChatMessage(role="assistant", content='{"action":"Screenshot"}'))
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved[-1] == {"role": "assistant", "content": '{"action":"Screenshot"}'}


def test_save_and_reload_round_trip(tmp_path):
    path = tmp_path / "memory.json"
    store = ConversationStore(path, "rules")
    for role, content in [("user", "Task: 검색"), ("assistant", "{}"), ("user", "Page URL: x")]:
        store.append(ChatMessage(role=role, content=content))

    reloaded = ConversationStore(path, "different rules")

    assert reloaded.messages == store.messages
    reloaded.save()
    assert ConversationStore(path, "rules").messages == store.messages


def test_reload_ignores_history_without_system_turn(tmp_path):
    path = tmp_path / "memory.json"
    path.write_text(json.dumps([{"role": "user", "content": "stray"}]), encoding="utf-8")

    store = ConversationStore(path, "rules")

    assert [m.role for m in store.messages] == ["system"]
    assert store.messages[0].content == "rules"


def test_reload_ignores_corrupt_file(tmp_path):
    path = tmp_path / "memory.json"
    path.write_text("{ not json", encoding="utf-8")

    store = ConversationStore(path, "rules")

    assert len(store) == 1


def test_messages_returns_copy(tmp_path):
    store = ConversationStore(tmp_path / "memory.json", "rules")
    store.messages.append(ChatMessage(role="user", content="sneaky"))
    assert len(store) == 1


def test_store_creates_parent_directories(tmp_path):
    path = tmp_path / "nested" / "dir" / "memory.json"
    store = ConversationStore(path, "rules")
    store.append(ChatMessage(role="user", content="Task: x"))
    assert path.exists()
