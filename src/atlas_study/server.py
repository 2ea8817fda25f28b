"""Main FastMCP server — mounts all sub-servers."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from .client import close_completion_client, get_completion_client
from .persistence import close_store
from .storage import close_storage_client
from .tools.analytics import analytics_server
from .tools.chat import chat_server
from .tools.infra import infra_server
from .tools.study import study_server
from .tools.uploads import uploads_server

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook.

    The completion client is built at startup so a missing GROQ_API_KEY
    stops the server before any tool is called.
    """
    get_completion_client()
    yield {}
    await close_store()
    await close_storage_client()
    closed = await close_completion_client()
    logger.info("Lifespan shutdown: completion client closed=%s", closed)


app = FastMCP(
    "atlas-study",
    instructions=(
        "Atlas study assistant — summaries, quizzes, flashcards, study plans, "
        "exam topic analysis, revision guides, and tutoring chat over pasted "
        "text or uploaded PDF/DOCX/TXT/MD files."
    ),
    lifespan=_lifespan,
)

app.mount(study_server)
app.mount(chat_server)
app.mount(uploads_server)
app.mount(analytics_server)
app.mount(infra_server)


def main() -> None:
    """Entry-point for ``atlas-study`` console script."""
    app.run()


if __name__ == "__main__":
    main()
