"""Extract a single service price draft from free-form contract text."""

from __future__ import annotations

from itinerary_ace.core.config import Settings
from itinerary_ace.models.ai import ContractDataOut
from itinerary_ace.models.constants import CURRENCIES, SERVICE_CATEGORIES, VEHICLE_TYPES
from itinerary_ace.services.ai.openrouter import chat_completion
from itinerary_ace.services.ai.replies import parse_json_reply

PROMPT_TEMPLATE = """You are an assistant that extracts structured information from service contracts for a travel agency.
Parse the contract text below and extract the details of the single primary service it offers (hotel, activity, transfer, meal or misc).

Contract Text:
```
{contract_text}
```

Return a JSON object with the following keys. Omit a key (or use null) when it is not mentioned or cannot be determined reliably.
- name: the main name of the service, tour or hotel.
- province: the city or province of the service, only if explicitly mentioned.
- category: one of {categories}.
- sub_category: a more specific type. For a vehicle transfer, the vehicle type; for an activity, e.g. "Tour" or "Entrance Fee".
- price1: the primary price. Room rate for hotels, adult price for activities, meals and ticket transfers, cost per vehicle for vehicle transfers.
- price2: a secondary price when clearly distinct. Extra bed rate for hotels, child price otherwise.
- currency: the currency code, one of {currencies}.
- unit_description: what the price refers to, e.g. "per night", "per person", "per vehicle".
- notes: important terms, conditions, inclusions or exclusions.
- max_passengers: for vehicle transfers, the vehicle capacity.
- transfer_mode_attempt: for transfers, "ticket" or "vehicle".
- vehicle_type_attempt: for vehicle transfers, one of {vehicle_types}.

Prices are numbers only. Return ONLY the JSON object."""


def build_prompt(contract_text: str) -> str:
    return PROMPT_TEMPLATE.format(
        contract_text=contract_text,
        categories=", ".join(SERVICE_CATEGORIES),
        currencies=", ".join(CURRENCIES),
        vehicle_types=", ".join(VEHICLE_TYPES),
    )


def parse_contract_reply(reply: str) -> ContractDataOut:
    return parse_json_reply(reply, ContractDataOut, "contract data")


def extract_contract_data(settings: Settings, contract_text: str) -> ContractDataOut:
    reply = chat_completion(
        settings,
        settings.contract_model,
        build_prompt(contract_text),
        response_format={"type": "json_object"},
    )
    return parse_contract_reply(reply)
