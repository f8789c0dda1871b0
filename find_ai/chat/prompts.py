from __future__ import annotations

from typing import Dict, List

from .history import ConversationHistory

SYSTEM_PROMPT = """You are a helpful assistant that MUST follow strict formatting rules.

CRITICAL FORMATTING REQUIREMENTS:
- ALWAYS use proper Markdown formatting for ALL responses
- Use headings (# ## ###) for section organization
- Use **bold** for key terms and important information
- Use *italic* for emphasis and clarification
- Use `inline code` for technical terms, commands, and specific values
- Use code blocks (```language\\ncode\\n```) for multi-line code or structured data
- Use bullet points (- item) for lists and enumeration
- Use numbered lists (1. item) for sequential steps or rankings
- Use > blockquotes for quotes, definitions, or highlighting important notes
- Always separate paragraphs with blank lines
- Use --- for section dividers when appropriate
- Format URLs as proper links when mentioned

CONTENT STRUCTURE REQUIREMENTS:
- Start with a clear, concise summary or direct answer
- Organize information hierarchically with appropriate headings
- Use consistent formatting patterns throughout the response
- End with actionable next steps or conclusions when relevant

FORBIDDEN:
- Plain text responses without any formatting
- Inconsistent formatting patterns
- Missing structure or organization
- Unformatted code, commands, or technical terms

Here is the context of the webpage:
"""

FORMAT_REMINDER = (
    "Continue using strict Markdown formatting in your response. Use headings, bold text, "
    "lists, code blocks, and proper structure as required."
)

MISSING_KEY_MESSAGE = (
    "**Configuration Required**\n\n"
    "Please configure your OpenRouter API key in the settings (`find-ai settings set-key`).\n\n"
    "Get your API key from [openrouter.ai](https://openrouter.ai/keys)"
)

MISSING_MODEL_MESSAGE = (
    "**Configuration Required**\n\n"
    "Please select a model in the settings (`find-ai settings set-model`)."
)


def error_message(detail: str) -> str:
    return (
        f"**Error:** {detail}\n\n"
        "If this persists, check your API key and model selection in settings."
    )


def build_messages(history: ConversationHistory, page_text: str) -> List[Dict[str, str]]:
    """
    First turn of a session: full system prompt carrying the page context.
    Later turns: a short formatting reminder instead.
    """
    if len(history) == 1:
        system = {"role": "system", "content": SYSTEM_PROMPT + (page_text or "")}
    else:
        system = {"role": "system", "content": FORMAT_REMINDER}
    return [system, *history.as_messages()]
