"""Script to embed every chunk that doesn't have an embedding yet.

Meant to run after new documents were stored, e.g. from a cron job.
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from ragchat.infrastructure.database import local_session  # noqa: E402
from ragchat.infrastructure.logging import get_logger, reset_correlation_id, set_correlation_id  # noqa: E402
from ragchat.infrastructure.logging.config import generate_correlation_id  # noqa: E402
from ragchat.modules.common.exceptions import DomainError  # noqa: E402
from ragchat.modules.embedding.pipeline import EmbeddingPipeline  # noqa: E402

logger = get_logger(__name__)


async def main() -> None:
    """Run the embedding backfill once."""
    token = set_correlation_id(generate_correlation_id())
    logger.info("Embedding all unembedded chunks...")

    try:
        async with local_session() as db:
            result = await EmbeddingPipeline().embed_all(db)
        logger.info(
            f"Embedded {result.chunks_embedded} chunks from {result.documents} documents in {result.pages} pages"
        )
    except DomainError as e:
        logger.error(f"Embedding backfill failed: {str(e)}", exc_info=True)
        sys.exit(1)
    finally:
        reset_correlation_id(token)


if __name__ == "__main__":
    asyncio.run(main())
