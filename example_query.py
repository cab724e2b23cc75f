#!/usr/bin/env python3
"""Example: Query the knowledge base interactively."""

import asyncio
import sys

from kb_rag import RAGSettings, build_rag_system
from kb_rag.config import configure_logging


async def run(settings: RAGSettings) -> None:
    rag = build_rag_system(settings)

    print("Loading knowledge base...")
    await rag.initialize()
    stats = await rag.get_stats()
    print(f"✓ Loaded successfully")
    print(f"  - Sources: {stats.knowledge_base.total_sources}")
    print(f"  - Vectors: {stats.vector_count}, {rag.vector_store.dimension} dimensions")
    print()

    # Interactive query loop
    print("=" * 60)
    print("Enter queries (or 'quit' to exit)")
    print("=" * 60)
    print()

    while True:
        query = input("Query: ").strip()
        if not query or query.lower() in ("quit", "exit", "q"):
            break

        print()

        try:
            query_vector = await rag.embedding_provider.embed(query)
            k = settings.query_limit
            results = rag.vector_store.search_with_scores(query_vector, k, rag.min_score)

            if not results:
                print(f"No sources above similarity {rag.min_score:.2f}.")
                print()
                continue

            print(f"Top {k} results:")
            print()

            for rank, scored in enumerate(results, start=1):
                source = scored.source
                print(f"[{rank}] Score: {scored.score:.4f}")
                print(f"    Title:    {source.title}")
                if source.metadata.category:
                    print(f"    Category: {source.metadata.category.value}")
                if source.metadata.url:
                    print(f"    URL:      {source.metadata.url}")

                excerpt = " ".join(source.content.split())
                if len(excerpt) > 150:
                    excerpt = excerpt[:150].rstrip() + "..."
                print(f"    Text:     {excerpt}")
                print()

        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            print()

    print("Goodbye!")


def main():
    settings = RAGSettings.from_env()
    configure_logging(settings.log_level)

    print("=" * 60)
    print("Knowledge Base Query Example")
    print("=" * 60)
    print(f"Embedding provider: {settings.embedding_provider}")
    print(f"Embedding model:    {settings.embed_model}")
    print(f"Min score:          {settings.min_score}")
    print()

    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
