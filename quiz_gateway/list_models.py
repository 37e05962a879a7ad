# quiz_gateway/list_models.py
"""Print the models the configured GEMINI_API_KEY can see.

Usage: python -m quiz_gateway.list_models
"""

import asyncio
import logging
from typing import Any, Dict, List

from quiz_gateway.errors import ModelUnavailableError
from quiz_gateway.llm_client import GeminiClient

logger = logging.getLogger(__name__)


def format_models(models: List[Dict[str, Any]]) -> str:
    lines = ["Available Models:"]
    for m in models:
        lines.append(f"- {m.get('name')} ({m.get('displayName', '')})")
        methods = m.get("supportedGenerationMethods")
        lines.append(f"  Methods: {', '.join(methods) if methods else '(unknown)'}")
        lines.append("")
    return "\n".join(lines)


async def _run() -> int:
    client = GeminiClient()
    try:
        models = await client.list_models()
    except ModelUnavailableError as e:
        logger.error("Could not list models: %s", e.message)
        return 1
    finally:
        await client.aclose()
    print(format_models(models))
    return 0


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    return asyncio.run(_run())


if __name__ == "__main__":
    raise SystemExit(main())
