from __future__ import annotations

from itinerary_ace.core.config import Settings
from itinerary_ace.models.ai import DescribeImageOut
from itinerary_ace.services.ai.openrouter import chat_completion

PROMPT = "What is in this image?"


def describe_image(settings: Settings, image_data_uri: str) -> DescribeImageOut:
    content = [
        {"type": "text", "text": PROMPT},
        {"type": "image_url", "image_url": {"url": image_data_uri}},
    ]
    description = chat_completion(settings, settings.image_model, content)
    return DescribeImageOut(description=description.strip())
