"""OpenAI calls: the chat proxy and the extra design recommendations."""

import json
import logging
import re
import time
from typing import List, Optional

import openai
from openai import OpenAI

from .conversation import merge_context, track_reply
from .errors import ChatConfigurationError, ChatProxyError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 512

SYSTEM_PROMPT = """
You are an expert network engineer assistant. Your goal is to help design a comprehensive network infrastructure.

CURRENT CONTEXT:
- Collected Information: {collected}
- Pending Questions: {pending}

DESIGN GUIDELINES:
1. Ask clarifying questions to gather complete network requirements
2. Provide detailed, practical recommendations
3. Consider scalability, security, and budget constraints
4. Give concise, actionable insights

INTERACTION STRATEGY:
- If information is incomplete, ask specific follow-up questions
- Summarize collected information periodically, one "<topic>: <value>" per line
  (company size, industry, locations, uptime, users, applications, security)
- Offer initial design recommendations when sufficient data is available

RESPONSE FORMAT:
- Clear, professional language
- Technical but accessible explanations
- Prioritize user's business objectives
"""


def build_system_prompt(context: dict) -> str:
    return SYSTEM_PROMPT.format(
        collected=json.dumps(context.get("collectedInfo", {})),
        pending=", ".join(context.get("questions", [])),
    )


def build_user_prompt(messages: List[dict]) -> str:
    """Single composite prompt embedding the earlier history and the latest message."""
    history = [
        {"role": "user" if m.get("role") == "user" else "assistant", "content": m.get("content", "")}
        for m in messages[:-1]
    ]
    latest = messages[-1].get("content", "") if messages else ""
    return (
        f"Current conversation: {json.dumps(history)}\n\n"
        f"User's latest message: {latest}\n\n"
        "Provide a helpful response to guide the user in specifying their network requirements."
    )


def build_chat_messages(messages: List[dict], context: dict) -> List[dict]:
    return [
        {"role": "system", "content": build_system_prompt(context)},
        {"role": "user", "content": build_user_prompt(messages)},
    ]


def _complete(chat_messages: List[dict], api_key: Optional[str], model: str, temperature: float,
              max_tokens: int) -> str:
    """One chat-completion call; returns the stripped reply text or raises ChatProxyError."""
    if not api_key:
        raise ChatConfigurationError("OpenAI API key not configured")

    start_time = time.time()
    logger.info(f"[START] chat completion ({model}, {len(chat_messages)} messages)")
    try:
        client = OpenAI(api_key=api_key)
        response = client.chat.completions.create(
            model=model,
            messages=chat_messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        content = response.choices[0].message.content
    except openai.OpenAIError as e:
        logger.error(f"OpenAI API error: {str(e)}")
        raise ChatProxyError(str(e)) from e
    except (AttributeError, IndexError, TypeError) as e:
        logger.error(f"Malformed OpenAI response: {str(e)}")
        raise ChatProxyError("Invalid response from OpenAI") from e

    if not content or not content.strip():
        raise ChatProxyError("Invalid response from OpenAI")

    logger.info(f"[DONE] chat completion in {time.time() - start_time:.2f} seconds")
    return content.strip()


def generate_chat_reply(messages: List[dict], context: Optional[dict] = None, api_key: Optional[str] = None,
                        model: str = DEFAULT_MODEL, temperature: float = DEFAULT_TEMPERATURE,
                        max_tokens: int = DEFAULT_MAX_TOKENS) -> dict:
    """Call the chat-completion API once and return ``{content, context}``.

    No retry: any failure surfaces as ChatProxyError.
    """
    if not api_key:
        raise ChatConfigurationError("OpenAI API key not configured")
    if not messages:
        raise ChatProxyError("No messages supplied")

    network_context = merge_context(context)
    content = _complete(build_chat_messages(messages, network_context), api_key, model, temperature, max_tokens)
    return {
        "content": content,
        "context": track_reply(content, network_context),
    }


########################
# DESIGN RECOMMENDATIONS
########################

RECOMMENDATIONS_PROMPT = """
You are reviewing a small-business network design.

Business inputs: {form}
Departments: {departments}
Network type: {network_type}
Redundant core: {redundancy}

Give {count} short, practical recommendations that go beyond the standard
device list (for example segmentation, backups, wireless standards).
Return one recommendation per line, each starting with "- ", and nothing else.
"""

AI_RECOMMENDATION_COUNT = 3
_BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")


def parse_recommendations(text: str) -> List[str]:
    """Bullet lines of a reply, markers stripped; prose lines are ignored."""
    items = []
    for line in (text or "").splitlines():
        if not _BULLET.match(line):
            continue
        item = _BULLET.sub("", line).strip()
        if item:
            items.append(item)
    return items


def generate_ai_recommendations(form: dict, departments: List[dict], network_type: str = "both",
                                redundancy: bool = False, api_key: Optional[str] = None,
                                model: str = DEFAULT_MODEL, temperature: float = DEFAULT_TEMPERATURE,
                                max_tokens: int = DEFAULT_MAX_TOKENS) -> List[str]:
    """Ask the model for extra design recommendations; raises ChatProxyError on failure."""
    prompt = RECOMMENDATIONS_PROMPT.format(
        form=json.dumps(form),
        departments=json.dumps(departments),
        network_type=network_type,
        redundancy="yes" if redundancy else "no",
        count=AI_RECOMMENDATION_COUNT,
    )
    content = _complete([{"role": "user", "content": prompt}], api_key, model, temperature, max_tokens)
    items = parse_recommendations(content)
    logger.info(f"Received {len(items)} AI recommendations")
    return items
