"""Tests for Handlebars prompt rendering and the turn context builder."""

import json

import pytest

from gemini_studio.context import build_turn_context, character_snapshot, recent_history
from gemini_studio.models import Character, Gauge, HistoryItem, Relationship, Stat
from gemini_studio.prompts import INIT_TEMPLATE, TURN_TEMPLATE, PromptError, render_prompt
from tests.helpers import relationship_payload


def _character() -> Character:
    return Character(
        class_title="Nut Thief",
        hp=Gauge(current=15, max=20),
        sp=Gauge(current=0, max=15),
        stats=[Stat(name="Agility", value=7)],
        inventory=["Acorn", "Rope"],
        active_quest="Steal the nut",
        relationships=[Relationship.model_validate(relationship_payload("rook"))],
    )


def _history(n: int) -> list[HistoryItem]:
    items = []
    for i in range(n):
        role = "model" if i % 2 == 0 else "user"
        kind = "narrative" if role == "model" else "action"
        items.append(HistoryItem(role=role, content=f"entry {i}", type=kind))
    return items


# ── render_prompt ────────────────────────────────────────────


def test_render_simple_variable():
    assert render_prompt("Hello {{name}}!", {"name": "World"}) == "Hello World!"


def test_render_missing_variable():
    assert render_prompt("Hello {{name}}!", {}) == "Hello !"


def test_render_invalid_template():
    with pytest.raises(PromptError):
        render_prompt("{{> missing_partial}}", {})


def test_init_prompt_keeps_quotes_unescaped():
    result = render_prompt(INIT_TEMPLATE, {"premise": 'I am a "nervous" squirrel'})
    assert 'premise: "I am a "nervous" squirrel"' in result
    assert "&quot;" not in result


# ── recent_history ───────────────────────────────────────────


def test_recent_history_formats_role_and_content():
    assert recent_history(_history(2)) == "model: entry 0\nuser: entry 1"


def test_recent_history_keeps_last_five_in_order():
    lines = recent_history(_history(8)).split("\n")
    assert lines == [
        "user: entry 3",
        "model: entry 4",
        "user: entry 5",
        "model: entry 6",
        "user: entry 7",
    ]


def test_recent_history_shorter_than_window():
    assert len(recent_history(_history(3)).split("\n")) == 3


def test_recent_history_empty():
    assert recent_history([]) == ""


def test_recent_history_custom_window():
    assert recent_history(_history(4), window=1) == "user: entry 3"
    assert recent_history(_history(4), window=0) == ""


# ── turn context ─────────────────────────────────────────────


def test_character_snapshot_formats_gauges_and_json():
    snap = character_snapshot(_character())
    assert snap["hp"] == "15/20"
    assert snap["sp"] == "0/15"
    assert json.loads(snap["stats"]) == [{"name": "Agility", "value": 7, "max": 10}]
    assert json.loads(snap["inventory"]) == ["Acorn", "Rope"]
    assert json.loads(snap["relationships"])[0]["fullName"] == "Rook"


def test_turn_prompt_contains_full_snapshot():
    ctx = build_turn_context("I climb the tree", _character(), "Game started.", "model: hi", 4)
    prompt = render_prompt(TURN_TEMPLATE, ctx)
    assert "CURRENT GAME STATE (Turn 4):" in prompt
    assert "Class: Nut Thief" in prompt
    assert "HP: 15/20" in prompt
    assert "SP: 0/15" in prompt
    assert '"Agility"' in prompt
    assert 'Inventory: ["Acorn", "Rope"]' in prompt
    assert "Active Quest: Steal the nut" in prompt
    assert '"fullName": "Rook"' in prompt
    assert "LONG TERM MEMORY:\nGame started." in prompt
    assert "RECENT HISTORY:\nmodel: hi" in prompt
    assert 'USER ACTION:\n"I climb the tree"' in prompt
