"""Handlebars prompt rendering for the two engine calls.

Both requests carry the same system instruction (see gemini_studio.engine);
what differs is the user contents, rendered from the templates below with a
context dict built by gemini_studio.context. Every variable uses the
triple-stash form so quotes and angle brackets reach the model unescaped.
"""

from collections.abc import Callable
from typing import Any

import pybars


_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


INIT_TEMPLATE = (
    'Initialize a new game with this premise: "{{{premise}}}". '
    "Generate the character sheet, opening scene, and any starting NPCs/Relationships."
)

TURN_TEMPLATE = """CURRENT GAME STATE (Turn {{{turn}}}):
Class: {{{char.class_title}}}
HP: {{{char.hp}}}
SP: {{{char.sp}}}
Stats: {{{char.stats}}}
Inventory: {{{char.inventory}}}
Active Quest: {{{char.active_quest}}}
Relationships: {{{char.relationships}}}

LONG TERM MEMORY:
{{{summary}}}

RECENT HISTORY:
{{{recent_history}}}

USER ACTION:
"{{{action}}}"

Instructions:
1. Resolve the action based on stats and inventory.
2. Update HP/SP if necessary (combat, traps, exertion).
3. Update Inventory if items are found or used.
4. Update Relationship scores, attitudes, and history for any NPC involved. Add new NPCs if met.
5. Provide a compelling narrative response.
6. Offer 3 relevant choices."""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return compiled(context)
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e
