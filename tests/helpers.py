"""Shared test doubles and canned engine payloads."""

import json
from typing import Any

from gemini_studio.llm import GenerationRequest


class StubLLM:
    """LLM double: returns canned responses in order and records every call.

    A response that is an Exception instance is raised instead of returned;
    a dict is serialised to JSON first.
    """

    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, GenerationRequest]] = []

    async def __call__(self, stage: str, request: GenerationRequest) -> str:
        self.calls.append((stage, request))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response


def relationship_payload(id: str = "rook", time: int = 1, **fields: Any) -> dict[str, Any]:
    payload = {
        "id": id,
        "fullName": id.title(),
        "role": "Rival",
        "relationshipScore": 50,
        "attitude": "Wary",
        "lastInteractionSummary": "Exchanged glares.",
        "lastInteractionTime": time,
        "importantFlags": [],
        "history": [],
    }
    payload.update(fields)
    return payload


def init_payload(**fields: Any) -> dict[str, Any]:
    payload = {
        "classTitle": "Nut Thief",
        "hpMax": 20,
        "spMax": 15,
        "stats": [{"name": "Agility", "value": 7}],
        "startingInventory": ["Acorn"],
        "initialScene": "A dragon sleeps on a hoard of nuts.",
        "firstQuest": "Steal the nut",
        "choices": ["Sneak", "Run", "Wait"],
        "relationships": [],
    }
    payload.update(fields)
    return payload


def turn_payload(**fields: Any) -> dict[str, Any]:
    payload = {
        "narrative": "You creep forward.",
        "hpChange": 0,
        "spChange": 0,
        "inventoryAdd": [],
        "inventoryRemove": [],
        "choices": ["Grab", "Hide", "Flee"],
        "isGameOver": False,
        "relationships": [],
    }
    payload.update(fields)
    return payload


