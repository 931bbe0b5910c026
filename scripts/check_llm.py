# scripts/check_llm.py
import asyncio
import sys
from pathlib import Path

# ensure repo root is on sys.path
repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from core.config import settings
from core.logging import setup_logging
from services.llm.completion_client import CompletionClient


async def main() -> int:
    setup_logging(settings.LOG_LEVEL)
    client = CompletionClient.from_settings(settings)
    try:
        if await client.initialize():
            print(f"✅ {client.model} is ready at {client.endpoint}")
            return 0
        print(f"❌ {client.model} is not usable at {client.endpoint}")
        return 1
    finally:
        await client.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
