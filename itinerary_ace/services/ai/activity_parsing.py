"""Split an activity description into its priced packages.

Feeds the activity pricing form: one activity name, an optional province and
one entry per package or pricing tier found in the text.
"""

from __future__ import annotations

from itinerary_ace.core.config import Settings
from itinerary_ace.models.ai import ParseActivityTextOut
from itinerary_ace.models.constants import CURRENCIES
from itinerary_ace.services.ai.openrouter import chat_completion
from itinerary_ace.services.ai.replies import parse_json_reply

PROMPT_TEMPLATE = """You are an assistant that extracts structured information about travel activities from text.
The activity below may have a single pricing option or several distinct packages.

Activity Description:
---
{activity_text}
---

Return a JSON object with these keys:
- activity_name: the overall name of the activity or tour service.
- province: the city or province of the activity, only if explicitly mentioned.
- parsed_packages: an array with one object per distinct package, tour option or pricing tier. A single price set is still one entry. Each object has:
  - package_name: the name of the package, e.g. "Half-Day Tour". Use a descriptive name such as "Standard Option" when none is given.
  - adult_price: the adult price of this package.
  - child_price: the child price, only if stated separately.
  - currency: the currency code of this package, one of {currencies}. Use a currency stated for the whole activity when the package has none.
  - notes: notes specific to this package such as duration, inclusions, exclusions or times.

Omit any key that is not mentioned or cannot be determined reliably. Prices are numbers only.
Return ONLY the JSON object."""


def build_prompt(activity_text: str) -> str:
    return PROMPT_TEMPLATE.format(
        activity_text=activity_text, currencies=", ".join(CURRENCIES)
    )


def parse_activity_reply(reply: str) -> ParseActivityTextOut:
    return parse_json_reply(reply, ParseActivityTextOut, "activity")


def parse_activity_text(settings: Settings, activity_text: str) -> ParseActivityTextOut:
    reply = chat_completion(
        settings,
        settings.activity_model,
        build_prompt(activity_text),
        response_format={"type": "json_object"},
    )
    return parse_activity_reply(reply)
