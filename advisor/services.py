import json
import logging
import re

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert waste sorting assistant. Analyze the image of trash/waste items and provide detailed sorting guidance.

For each item you identify in the image:
1. Name the item clearly
2. Categorize it as one of: "recyclable", "organic", or "residual"
3. Explain briefly why it belongs in that category

Provide your response in the following JSON format:
{
  "items": [
    {
      "name": "Item name",
      "category": "recyclable|organic|residual",
      "reason": "Brief explanation",
      "bagColor": "blue|green|black"
    }
  ],
  "summary": "A brief overall summary of what was found and general sorting advice"
}

Category to bag color mapping:
- recyclable: blue bag (plastics, paper, glass, metals)
- organic: green bag (food scraps, yard waste, compostable materials)
- residual: black bag (contaminated items, certain plastics, mixed materials)

Be specific about item names. If you see multiple items, list them all. If unsure about an item, make your best educated guess and note the uncertainty."""

USER_PROMPT = "Please analyze this image and tell me how to sort the waste items you see."

FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class AdvisorError(Exception):
    """The sorting advisor could not produce an answer."""
    status_code = 502
    default_message = "The sorting advisor is unavailable. Please try again."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AdvisorRateLimited(AdvisorError):
    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class AdvisorQuotaExceeded(AdvisorError):
    status_code = 402
    default_message = "Payment required. Please add funds to continue."


def content_text(content):
    """Flatten a reply given as a list of content parts into plain text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return ''.join(
            part.get('text') or '' for part in content
            if isinstance(part, dict) and isinstance(part.get('text'), str)
        )
    return ''


def parse_advice(content):
    """
    Turn the model's reply into structured advice.

    Replies wrapped in markdown fences are unwrapped first. Anything that
    is not a JSON object comes back as the raw text under `summary`.
    """
    content = content_text(content)
    match = FENCED_JSON.search(content)
    candidate = match.group(1).strip() if match else content.strip()
    try:
        parsed = json.loads(candidate)
    except ValueError:
        parsed = None

    if not isinstance(parsed, dict):
        return {'items': [], 'summary': content, 'raw': True}

    items = parsed.get('items')
    parsed['items'] = [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []
    if not isinstance(parsed.get('summary'), str):
        parsed['summary'] = ''
    return parsed


def build_payload(image_data_uri):
    return {
        "model": settings.AI_MODEL,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": USER_PROMPT},
                    {"type": "image_url", "image_url": {"url": image_data_uri}},
                ],
            },
        ],
    }


def analyze_image(image_data_uri):
    """Ask the AI gateway how to sort the items in a photo. One attempt, no retries."""
    if not settings.AI_GATEWAY_API_KEY:
        logger.error("AI_GATEWAY_API_KEY is not configured")
        raise AdvisorError("The sorting advisor is not configured.")
    if not image_data_uri:
        raise AdvisorError("No image provided.")

    logger.info(f"Calling AI gateway at {settings.AI_GATEWAY_URL} with model {settings.AI_MODEL}")
    try:
        response = httpx.post(
            settings.AI_GATEWAY_URL,
            headers={"Authorization": f"Bearer {settings.AI_GATEWAY_API_KEY}"},
            json=build_payload(image_data_uri),
            timeout=settings.AI_TIMEOUT,
        )
    except httpx.RequestError as e:
        logger.error(f"AI gateway request error: {e}")
        raise AdvisorError()

    if response.status_code == 429:
        logger.warning("AI gateway rate limit hit")
        raise AdvisorRateLimited()
    if response.status_code == 402:
        logger.warning("AI gateway credits exhausted")
        raise AdvisorQuotaExceeded()
    if response.status_code != 200:
        logger.error(f"AI gateway error: {response.status_code} - {response.text}")
        raise AdvisorError()

    try:
        content = response.json()["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError):
        logger.error(f"Unexpected AI gateway response: {response.text}")
        raise AdvisorError()
    content = content_text(content)
    if not content.strip():
        raise AdvisorError("No response from the sorting advisor.")

    advice = parse_advice(content)
    logger.info(f"AI gateway identified {len(advice['items'])} item(s){' (raw reply)' if advice.get('raw') else ''}")
    return advice
