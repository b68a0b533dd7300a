# prompts.py

from typing import Dict, List, Optional

from langchain_core.prompts import ChatPromptTemplate

# Braces are doubled because this goes through ChatPromptTemplate
ROUTINE_DESIGNER_PROMPT = """You are an expert routine designer and wellness coach. Create comprehensive, practical routines based on user requests. Always respond with a valid JSON object in this exact format:

{{
  "title": "A compelling title for the routine",
  "description": "A brief description of what this routine achieves",
  "steps": [
    {{
      "step": 1,
      "action": "Specific action to take",
      "duration": "Time estimate (optional)",
      "notes": "Additional tips or context (optional)"
    }}
  ]
}}

Make routines practical, achievable, and tailored to the user's needs. Include realistic time estimates and helpful tips."""

ROUTINE_REQUEST = 'Create a routine based on this description: "{prompt}"'

ROUTINE_REQUEST_WITH_IMAGE = (
    'Create a routine based on this description: "{prompt}". '
    "I've also included an image for additional context."
)

# Image support is text-only: the provider never receives the image bytes
IMAGE_CONTEXT_NOTE = "\n\nNote: Image context has been provided for additional guidance."

# langchain message types -> OpenAI chat roles
_ROLES = {"system": "system", "human": "user", "ai": "assistant"}


def build_messages(prompt: str, image: Optional[str] = None) -> List[Dict[str, str]]:
    """Builds the system + user exchange sent to the chat-completion endpoint."""
    if image:
        user_template = ROUTINE_REQUEST_WITH_IMAGE + IMAGE_CONTEXT_NOTE
    else:
        user_template = ROUTINE_REQUEST

    prompt_template = ChatPromptTemplate.from_messages(
        [
            ("system", ROUTINE_DESIGNER_PROMPT),
            ("human", user_template),
        ]
    )

    return [
        {"role": _ROLES[message.type], "content": message.content}
        for message in prompt_template.format_messages(prompt=prompt)
    ]
