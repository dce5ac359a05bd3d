import base64
from typing import Any, Dict, List, Optional


SCREENSHOT_INSTRUCTIONS = """
You are Nora, helping an elderly person understand their phone screen.

IMPORTANT:
- Describe what you see in SIMPLE terms
- Give ONE clear action they should take next
- Be specific: "Tap the blue button that says 'Connect' in the middle of the screen"
- Keep response to 2-3 sentences maximum
- Speak warmly and encouragingly
"""

SCAM_IMAGE_INSTRUCTIONS = """
You are a security expert helping elderly people identify scams.

Analyze the message/email in the image and determine:
1. Is this SAFE, SUSPICIOUS, or DANGEROUS?
2. What are the red flags?
3. What should they do?

IMPORTANT:
- Be clear and direct
- Use simple language
- If it's a scam, say so firmly but calmly
- Give ONE specific action to take
- Keep response SHORT (3-4 sentences)
"""

DEFAULT_SCREENSHOT_QUESTION = "I'm stuck. What should I do next?"
SCAM_QUESTION = "Is this message safe? Should I be worried?"


def build_screenshot_messages(
    *,
    image: bytes,
    mime_type: Optional[str],
    question: Optional[str] = None,
) -> List[Dict[str, Any]]:
    return _image_messages(
        instructions=SCREENSHOT_INSTRUCTIONS,
        text=question or DEFAULT_SCREENSHOT_QUESTION,
        image=image,
        mime_type=mime_type,
    )


def build_scam_messages(
    *,
    image: bytes,
    mime_type: Optional[str],
) -> List[Dict[str, Any]]:
    return _image_messages(
        instructions=SCAM_IMAGE_INSTRUCTIONS,
        text=SCAM_QUESTION,
        image=image,
        mime_type=mime_type,
    )


# ─────────────────────────────────────────────
# Internal helpers
# ─────────────────────────────────────────────

def _image_messages(
    *,
    instructions: str,
    text: str,
    image: bytes,
    mime_type: Optional[str],
) -> List[Dict[str, Any]]:
    return [
        {"role": "system", "content": instructions.strip()},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": text},
                {
                    "type": "image_url",
                    "image_url": {"url": to_data_url(image, mime_type)},
                },
            ],
        },
    ]


def to_data_url(image: bytes, mime_type: Optional[str]) -> str:
    encoded = base64.b64encode(image).decode("utf-8")
    return f"data:{mime_type or 'image/jpeg'};base64,{encoded}"
