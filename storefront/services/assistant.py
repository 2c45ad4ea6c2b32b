"""
storefront/services/assistant.py
────────────────────────────────
Shopping assistant backed by the OpenAI chat-completions API.

Design principles
─────────────────
• One AsyncOpenAI client shared across the process lifetime, created on
  first use so the rest of the API runs without an API key.
• The model may call four tools; they run server-side against the same
  services the HTTP endpoints use, on behalf of the calling shopper.
• Tool failures are reported back to the model as {"error": ...} so it can
  explain them; OpenAI failures raise AIServiceError (HTTP 502).
"""

import json
import logging
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional

from fastapi import HTTPException
from openai import AsyncOpenAI, OpenAIError
from sqlmodel import Session

from storefront.core.config import get_settings
from storefront.core.exceptions import AIServiceError, AssistantUnavailableError
from storefront.models import Persona, User
from storefront.schemas import ChatMessage, ChatResponse, ProductSummary
from storefront.services import accounts, cart, catalog, recommendations

logger = logging.getLogger(__name__)
settings = get_settings()

SEARCH_RESULT_LIMIT = 8

TOOLS: List[Dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": "search_products",
            "description": "Search for products based on user query, category, or price range.",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Search query"},
                    "category": {"type": "string", "description": "Product category"},
                    "max_price": {"type": "number", "description": "Maximum price"},
                },
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "get_recommendations",
            "description": "Get personalized product recommendations for the user.",
            "parameters": {
                "type": "object",
                "properties": {
                    "limit": {"type": "integer", "description": "Number of recommendations", "minimum": 1, "maximum": 20},
                },
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "add_to_cart",
            "description": "Add a product to the user's shopping cart.",
            "parameters": {
                "type": "object",
                "properties": {
                    "product_id": {"type": "string", "description": "Product ID"},
                    "quantity": {"type": "integer", "description": "Quantity to add", "minimum": 1},
                },
                "required": ["product_id"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "get_user_preferences",
            "description": "Get the user's shopping preferences and history.",
            "parameters": {"type": "object", "properties": {}},
        },
    },
]


@lru_cache
def get_client() -> AsyncOpenAI:
    if not settings.assistant_enabled:
        raise AssistantUnavailableError()
    return AsyncOpenAI(api_key=settings.OPENAI_API_KEY)


def _summaries(products) -> List[Dict[str, Any]]:
    return [ProductSummary.model_validate(p).model_dump(by_alias=True) for p in products]


class ToolRunner:
    """Executes tool calls for one shopper within one database session."""

    def __init__(self, db: Session, user: Optional[User]) -> None:
        self.db = db
        self.user = user
        self._tools: Dict[str, Callable[..., Dict[str, Any]]] = {
            "search_products": self.search_products,
            "get_recommendations": self.get_recommendations,
            "add_to_cart": self.add_to_cart,
            "get_user_preferences": self.get_user_preferences,
        }

    def run(self, name: str, raw_arguments: str) -> Dict[str, Any]:
        tool = self._tools.get(name)
        if tool is None:
            return {"error": f"Unknown tool '{name}'."}
        try:
            arguments = json.loads(raw_arguments or "{}")
            if not isinstance(arguments, dict):
                raise ValueError("arguments must be a JSON object")
            return tool(**arguments)
        except (json.JSONDecodeError, TypeError, ValueError) as exc:
            logger.warning("Tool %s called with bad arguments %r: %s", name, raw_arguments, exc)
            return {"error": f"Invalid arguments for {name}: {exc}"}
        except HTTPException as exc:
            return {"error": exc.detail}

    def search_products(
        self,
        query: str = "",
        category: Optional[str] = None,
        max_price: Optional[float] = None,
    ) -> Dict[str, Any]:
        products, _ = catalog.list_products(
            self.db,
            search=query or None,
            category=category,
            max_price=max_price,
            limit=SEARCH_RESULT_LIMIT,
        )
        message = f"Found {len(products)} products"
        if query:
            message += f' for "{query}"'
        if category:
            message += f" in {category}"
        return {"products": _summaries(products), "count": len(products), "message": message}

    def get_recommendations(self, limit: int = 6) -> Dict[str, Any]:
        limit = max(1, min(int(limit), 20))
        products = recommendations.recommend(self.db, self.user.id if self.user else None, limit)
        return {
            "recommendations": _summaries(products),
            "count": len(products),
            "message": f"Here are {len(products)} personalized recommendations for you",
        }

    def add_to_cart(self, product_id: str, quantity: int = 1) -> Dict[str, Any]:
        if self.user is None:
            return {"success": False, "message": "Please sign in to add items to your cart."}
        quantity = max(1, int(quantity))
        result = cart.add_item(self.db, self.user.id, product_id, quantity)
        return {
            "success": True,
            "message": f"Added {quantity} item(s) to cart",
            "cartTotal": result.total,
            "cartItemCount": len(result.items),
        }

    def get_user_preferences(self) -> Dict[str, Any]:
        if self.user is None:
            return {"message": "Could not retrieve user preferences: the shopper is not signed in."}
        detail = accounts.user_detail(self.db, self.user)
        return {
            "preferences": detail.preferences.model_dump(by_alias=True) if detail.preferences else None,
            "loyaltyTier": detail.loyalty_tier,
            "totalSpent": detail.total_spent,
            "accessibilityNeeds": detail.accessibility_needs,
            "message": "Retrieved user preferences successfully",
        }


def build_system_prompt(db: Session, user: Optional[User]) -> str:
    lines = [
        "You are a friendly shopping assistant for an online store.",
        "Use the tools to search the catalogue, fetch recommendations, add items to the cart",
        "and look up the shopper's preferences. Never invent products or prices:",
        "only mention items returned by a tool. Keep answers short.",
    ]
    if user is None:
        lines.append("The shopper is not signed in; cart actions require signing in.")
        return "\n".join(lines)

    lines.append(f"The shopper is a {user.loyalty_tier} loyalty member.")
    if user.accessibility_needs:
        lines.append("Accessibility needs: " + ", ".join(user.accessibility_needs) + ".")
    persona = db.get(Persona, user.persona_id) if user.persona_id else None
    if persona is not None:
        lines.append(f"Shopping persona: {persona.name} ({persona.description})")
    if user.language_preference and user.language_preference != "en":
        lines.append(f"Reply in the language with code '{user.language_preference}'.")
    return "\n".join(lines)


async def chat(db: Session, user: Optional[User], history: List[ChatMessage]) -> ChatResponse:
    """
    Run one assistant turn: call the model, execute any requested tools,
    and repeat until it answers in text or the tool-round budget runs out.
    """
    client = get_client()
    runner = ToolRunner(db, user)

    messages: List[Dict[str, Any]] = [{"role": "system", "content": build_system_prompt(db, user)}]
    messages.extend({"role": m.role, "content": m.content} for m in history)
    called: List[str] = []

    try:
        for round_no in range(settings.ASSISTANT_MAX_TOOL_ROUNDS + 1):
            final_round = round_no == settings.ASSISTANT_MAX_TOOL_ROUNDS
            response = await client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=messages,
                tools=TOOLS,
                tool_choice="none" if final_round else "auto",
                max_tokens=600,
                temperature=0.4,
            )
            message = response.choices[0].message

            if not message.tool_calls:
                logger.info("Assistant replied after %d tool call(s)", len(called))
                return ChatResponse(reply=message.content or "", tool_calls=called)

            messages.append(
                {
                    "role": "assistant",
                    "content": message.content,
                    "tool_calls": [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {"name": tc.function.name, "arguments": tc.function.arguments},
                        }
                        for tc in message.tool_calls
                    ],
                }
            )
            for tc in message.tool_calls:
                called.append(tc.function.name)
                result = runner.run(tc.function.name, tc.function.arguments)
                logger.info("Assistant tool call: %s", tc.function.name)
                messages.append(
                    {"role": "tool", "tool_call_id": tc.id, "content": json.dumps(result, default=str)}
                )
    except OpenAIError as exc:
        logger.error("Assistant chat error: %s", exc)
        raise AIServiceError(f"Assistant failed: {exc}") from exc

    # reached only if the model still asks for tools on the final round
    raise AIServiceError("Assistant did not produce a reply.")
