"""Main Quart application for the laptop sales assistant."""
import logging
from typing import Optional

from quart import Quart, request, jsonify
import structlog

from salesbot import config
from salesbot.errors import RequestParseError
from salesbot.llm_client import GeminiClient, TogetherClient
from salesbot.memory import ConversationStore
from salesbot.rag.documents import VectorIndex
from salesbot.rag.generator import AnswerGenerator
from salesbot.rag.ingest import CatalogSeeder
from salesbot.rag.pipeline import RagPipeline, parse_request
from salesbot.rag.retriever import Retriever

# Configure structured logging
logging.basicConfig(format="%(message)s", level=config.LOG_LEVEL)
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(ensure_ascii=False),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "86400",
}

INTERNAL_ERROR = "Internal Server Error"
SEED_ERROR = "Error occurred while storing laptop data."
SEED_DONE = "All laptops data stored in the vector index."


def build_vector_index(backend: str = None) -> VectorIndex:
    """Create the configured vector index ("pinecone" or "faiss")."""
    backend = (backend or config.VECTOR_BACKEND).lower()
    if backend == "pinecone":
        from salesbot.rag.store_pinecone import PineconeIndex
        return PineconeIndex()
    if backend == "faiss":
        from salesbot.rag.store_faiss import FAISSIndex
        return FAISSIndex()
    raise ValueError(f"Unknown VECTOR_BACKEND: {backend!r}")


def create_app(
    pipeline: Optional[RagPipeline] = None,
    seeder: Optional[CatalogSeeder] = None,
) -> Quart:
    """Build the app and its collaborators.

    Args:
        pipeline: Request pipeline (built from config if not provided)
        seeder: Catalog seeder (built from config if not provided)
    """
    app = Quart(__name__)

    if pipeline is None or seeder is None:
        index = pipeline.retriever.index if pipeline is not None else build_vector_index()
        embedder = TogetherClient()
        if pipeline is None:
            pipeline = RagPipeline(
                store=ConversationStore(),
                retriever=Retriever(embedder, index),
                generator=AnswerGenerator(GeminiClient()),
            )
        if seeder is None:
            seeder = CatalogSeeder(embedder, index)

    @app.route("/rag", methods=["POST"], provide_automatic_options=False)
    async def rag():
        """Answer a chat message with retrieved listings.

        Expects JSON body:
        {
            "userPrompt": "user message text",
            "sessionId": "client-chosen session id"
        }

        Returns JSON:
        {
            "documents": [{"pageContent": "...", "metadata": {...}, "score": 0.8}],
            "question": "user message text",
            "results": "assistant answer",
            "answer": "assistant answer",
            "history": [{"role": "user", "content": "..."}, ...]
        }
        """
        try:
            try:
                data = await request.get_json(force=True)
            except Exception as e:
                raise RequestParseError(f"Body is not valid JSON: {e}") from e

            body = parse_request(data)
            result = await pipeline.answer(body.sessionId, body.userPrompt)
            return jsonify(result.to_dict())

        except Exception as e:
            logger.error("rag_endpoint_error", error=str(e), error_type=type(e).__name__)
            return jsonify({"error": INTERNAL_ERROR}), 500

    @app.route("/rag", methods=["GET"], provide_automatic_options=False)
    async def seed_catalog():
        """Store the catalog in the vector index (upsert by listing id)."""
        try:
            stats = await seeder.seed()
            logger.info("catalog_seed_endpoint_completed", **stats)
            return jsonify({"message": SEED_DONE})

        except Exception as e:
            logger.error("catalog_seed_endpoint_error", error=str(e), error_type=type(e).__name__)
            return jsonify({"error": SEED_ERROR}), 500

    @app.route("/rag", methods=["OPTIONS"], provide_automatic_options=False)
    async def rag_preflight():
        """CORS preflight."""
        return "", 204, CORS_HEADERS

    @app.route("/health/live")
    async def health_live():
        """Liveness probe - check if app is running."""
        return jsonify({"status": "alive"}), 200

    @app.route("/health/ready")
    async def health_ready():
        """Readiness probe - check that the vector index answers."""
        checks = {"status": "healthy", "vector_count": None}
        try:
            checks["vector_count"] = await pipeline.retriever.index.count()
            return jsonify(checks), 200
        except Exception as e:
            logger.error("health_check_failed", error=str(e))
            checks["status"] = "unhealthy"
            checks["error"] = str(e)
            return jsonify(checks), 503

    @app.errorhandler(404)
    async def not_found(error):
        """Handle 404 errors."""
        return jsonify({"error": "Not found"}), 404

    return app


app = create_app()


if __name__ == "__main__":
    # For development - run under hypercorn in production
    app.run(host="0.0.0.0", port=5000, debug=True)
