from typing import Any, Dict, List, Optional


CHAT_RULES = """
RULES:
- Be conversational and warm, avoid jargon
- Keep responses to 2-3 sentences max
- Give ONE step at a time, never multiple steps
- After each step, ask if it worked
- For device features (WiFi, screenshots), ask device type if unknown
- Be reassuring about scams without lecturing
"""


def build_chat_messages(
    *,
    message: str,
    history: Optional[List[Dict[str, Any]]] = None,
    device_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Build the conversation sent to the chat model:
    system prompt, prior turns, then the new user message.
    """
    return [
        {"role": "system", "content": build_system_prompt(device_type)},
        *_clean_history(history),
        {"role": "user", "content": message},
    ]


def build_system_prompt(device_type: Optional[str] = None) -> str:
    device_info = f" Device: {device_type}." if device_type else ""
    return (
        f"You are Nora, a warm tech helper for elderly users.{device_info}\n"
        f"{CHAT_RULES.rstrip()}"
    )


# ─────────────────────────────────────────────
# Internal helpers
# ─────────────────────────────────────────────

def _clean_history(history: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """
    Keep only well-formed user/assistant turns.
    """
    turns: List[Dict[str, Any]] = []
    for turn in history or []:
        if not isinstance(turn, dict):
            continue
        role = turn.get("role")
        content = turn.get("content")
        if role in ("user", "assistant") and isinstance(content, str):
            turns.append({"role": role, "content": content})
    return turns
