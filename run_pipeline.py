# run_pipeline.py
"""
Push one local HTML (or text) file through the full pipeline against the
configured Ollama endpoint and database, then print the analysis.

    python run_pipeline.py page.html --url https://example.com/post
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Make the repo root importable
repo_root = Path(__file__).resolve().parent
if str(repo_root) not in sys.path:
    sys.path.append(str(repo_root))

from core.config import settings
from core.logging import setup_logging
from services.pipeline.content_handler import ContentHandler


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("path", type=Path, help="HTML or text file to process")
    parser.add_argument("--url", default=None, help="URL to record (defaults to the file URI)")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(settings.LOG_LEVEL)

    handler = ContentHandler.from_settings(settings)
    try:
        if not await handler.initialize():
            print("❌ LLM not available – nothing processed")
            return 1

        raw = args.path.read_text(encoding="utf-8", errors="replace")
        url = args.url or args.path.resolve().as_uri()
        result = await handler.process_page(url, raw)
        if result is None:
            print("❌ Failed to process content")
            return 1

        print("\n=== PAGE ANALYSIS ===")
        print(f"Categories : {', '.join(result.categories)}")
        print(f"Topics     : {', '.join(result.topics)}")
        print(f"Summary    : {result.summary}")
        return 0
    finally:
        await handler.cleanup()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
