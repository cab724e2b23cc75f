#!/usr/bin/env python3
"""Example: Ingest and embed the knowledge base, then print its stats."""

import asyncio
import sys

from kb_rag import RAGSettings, build_rag_system
from kb_rag.config import configure_logging


async def run(settings: RAGSettings) -> None:
    rag = build_rag_system(settings)
    await rag.initialize()
    stats = await rag.get_stats()

    print()
    print("=" * 60)
    print("Initialization completed successfully!")
    print("=" * 60)
    print(f"State:           {stats.state}")
    print(f"Vector count:    {stats.vector_count}")
    print(f"Fallback calls:  {stats.embedding_fallbacks}")
    print(f"Total sources:   {stats.knowledge_base.total_sources}")
    print("By type:")
    for name, count in stats.knowledge_base.by_type.items():
        print(f"  - {name}: {count}")
    print("By category:")
    for name, count in stats.knowledge_base.by_category.items():
        print(f"  - {name}: {count}")
    print("=" * 60)


def main():
    settings = RAGSettings.from_env()
    configure_logging(settings.log_level)

    print("=" * 60)
    print("Knowledge Base RAG")
    print("=" * 60)
    print(f"Embedding provider: {settings.embedding_provider}")
    print(f"Embedding model:    {settings.embed_model}")
    print(f"Dimensions:         {settings.embedding_dimensions}")
    print(f"Batch size:         {settings.batch_size}")
    print(f"Repositories:       {', '.join(r.full_name for r in settings.repositories)}")
    print(f"Scraped pages dir:  {settings.scraped_dir}")
    print("=" * 60)

    try:
        asyncio.run(run(settings))
    except Exception as e:
        print(f"\nError during initialization: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
