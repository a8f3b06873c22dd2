"""
FastAPI web board.

Single page with the three columns, the edit dialog and drag-and-drop,
plus a JSON API the page uses for every change.

Usage:
    from kanban_board.web import run_server

    run_server(port=8080)  # Serve on port 8080

Or via the CLI:
    kanban web --port 8080
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

try:
    from fastapi import FastAPI, HTTPException, Request
    from fastapi.responses import HTMLResponse, JSONResponse
    from fastapi.middleware.cors import CORSMiddleware
    import uvicorn
    HAS_FASTAPI = True
except ImportError:
    HAS_FASTAPI = False

from ..tasks.kanban import KanbanBoard
from ..tasks.models import CardStatus
from ..tasks.render import render, render_columns_html
from ..tasks.storage import CardStore, StorageError

logger = logging.getLogger(__name__)


@dataclass
class WebConfig:
    """Web board configuration."""
    title: str = "Kanban Board"
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False
    cors_origins: List[str] = None

    def __post_init__(self):
        if self.cors_origins is None:
            self.cors_origins = ["*"]


class CardCreate(BaseModel):
    title: str
    description: str = ""
    status: CardStatus = CardStatus.TODO


class CardUpdate(BaseModel):
    title: str
    description: str = ""


class CardMove(BaseModel):
    status: CardStatus


class KanbanWeb:
    """
    FastAPI Kanban board.

    Every API call goes through KanbanBoard, so the persisted collection
    always matches what the page shows after a refresh.
    """

    def __init__(
        self,
        board: KanbanBoard,
        config: Optional[WebConfig] = None
    ):
        if not HAS_FASTAPI:
            raise ImportError(
                "FastAPI is required for the web board. "
                "Install with: pip install fastapi uvicorn"
            )

        self.board = board
        self.config = config or WebConfig()
        self.app = self._create_app()

    def _create_app(self) -> FastAPI:
        app = FastAPI(
            title=self.config.title,
            description="Kanban board",
            version="1.0.0"
        )

        app.add_middleware(
            CORSMiddleware,
            allow_origins=self.config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        @app.exception_handler(StorageError)
        async def storage_error_handler(request: Request, exc: StorageError):
            logger.error(f"[WEB] storage failure | path={request.url.path} error={exc}")
            return JSONResponse(status_code=507, content={"error": str(exc)})

        self._setup_routes(app)

        return app

    def _card_or_404(self, card_id: str):
        card = self.board.get_card(card_id)
        if card is None:
            raise HTTPException(status_code=404, detail=f"Card not found: {card_id}")
        return card

    def _setup_routes(self, app: FastAPI) -> None:

        @app.get("/", response_class=HTMLResponse)
        def index():
            """Board page."""
            return self._render_page_html()

        @app.get("/api/health")
        async def health():
            return {"status": "ok", "timestamp": datetime.now().isoformat()}

        @app.get("/api/cards")
        def list_cards():
            return {"cards": [card.to_dict() for card in self.board.cards]}

        @app.get("/api/board")
        def board_view():
            """Rendered columns and count badges."""
            view = render(self.board.cards)
            return {
                "columns": {
                    status.value: {"count": column.count, "html": "".join(c.html for c in column.cards)}
                    for status, column in view.columns.items()
                }
            }

        @app.post("/api/cards", status_code=201)
        def create_card(payload: CardCreate):
            card = self.board.create(payload.title, payload.description, payload.status)
            if card is None:
                raise HTTPException(status_code=422, detail="Title required")
            return card.to_dict()

        @app.put("/api/cards/{card_id}")
        def edit_card(card_id: str, payload: CardUpdate):
            self._card_or_404(card_id)
            card = self.board.edit(card_id, payload.title, payload.description)
            if card is None:
                raise HTTPException(status_code=422, detail="Title required")
            return card.to_dict()

        @app.post("/api/cards/{card_id}/move")
        def move_card(card_id: str, payload: CardMove):
            card = self._card_or_404(card_id)
            moved = self.board.move(card_id, payload.status)
            return {"moved": moved is not None, "card": card.to_dict()}

        @app.delete("/api/cards/{card_id}")
        def delete_card(card_id: str):
            self._card_or_404(card_id)
            self.board.delete(card_id)
            return {"deleted": True}

        @app.delete("/api/cards")
        def clear_cards(confirm: bool = False):
            """Delete every card; the page asks the user before calling this."""
            if not confirm:
                raise HTTPException(status_code=400, detail="Pass confirm=true to delete all cards")
            cleared = self.board.clear_all(lambda message: True)
            return {"cleared": cleared}

    def _render_page_html(self) -> str:
        """Build the board page."""
        title = html.escape(self.config.title)
        columns = render_columns_html(render(self.board.cards))
        return f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        :root {{
            --bg-primary: #1a1a2e;
            --bg-secondary: #16213e;
            --bg-card: #0f3460;
            --text-primary: #eee;
            --text-secondary: #aaa;
            --accent: #e94560;
        }}

        * {{
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }}

        body {{
            font-family: 'Segoe UI', system-ui, -apple-system, sans-serif;
            background: var(--bg-primary);
            color: var(--text-primary);
            min-height: 100vh;
        }}

        .header {{
            background: var(--bg-secondary);
            padding: 1rem 2rem;
            display: flex;
            justify-content: space-between;
            align-items: center;
        }}

        .header h1 {{
            font-size: 1.5rem;
            color: var(--accent);
        }}

        .board {{
            display: grid;
            grid-template-columns: repeat(3, 1fr);
            gap: 1.5rem;
            padding: 1.5rem;
        }}

        .column {{
            background: var(--bg-secondary);
            border-radius: 12px;
            padding: 1rem;
        }}

        .column header {{
            display: flex;
            align-items: center;
            gap: 0.5rem;
            margin-bottom: 1rem;
        }}

        .column h2 {{
            font-size: 0.9rem;
            text-transform: uppercase;
            letter-spacing: 1px;
            color: var(--text-secondary);
        }}

        .count {{
            padding: 0.1rem 0.5rem;
            border-radius: 12px;
            background: var(--bg-card);
            font-size: 0.75rem;
        }}

        .add-card, .btn {{
            margin-left: auto;
            border: none;
            background: var(--bg-card);
            color: var(--text-primary);
            border-radius: 6px;
            padding: 0.3rem 0.7rem;
            cursor: pointer;
        }}

        .cards {{
            min-height: 120px;
            display: flex;
            flex-direction: column;
            gap: 0.75rem;
            border-radius: 8px;
        }}

        .cards.drag-over {{
            outline: 2px dashed var(--accent);
        }}

        .card {{
            background: var(--bg-card);
            border-radius: 8px;
            padding: 0.75rem;
            cursor: grab;
        }}

        .card.dragging {{
            opacity: 0.5;
        }}

        .card p {{
            color: var(--text-secondary);
            font-size: 0.85rem;
            margin-top: 0.4rem;
            white-space: pre-wrap;
        }}

        .modal {{
            position: fixed;
            inset: 0;
            background: rgba(0, 0, 0, 0.6);
            display: flex;
            align-items: center;
            justify-content: center;
        }}

        .modal-body {{
            background: var(--bg-secondary);
            border-radius: 12px;
            padding: 1.5rem;
            width: 420px;
            display: flex;
            flex-direction: column;
            gap: 0.75rem;
        }}

        .modal input, .modal textarea {{
            background: var(--bg-primary);
            color: var(--text-primary);
            border: 1px solid var(--bg-card);
            border-radius: 6px;
            padding: 0.5rem;
        }}

        .actions {{
            display: flex;
            gap: 0.5rem;
            justify-content: flex-end;
        }}

        .hidden {{
            display: none;
        }}
    </style>
</head>
<body>
    <header class="header">
        <h1>{title}</h1>
        <button class="btn" id="clearAll">Clear all</button>
    </header>

    <main class="board" id="board">
{columns}
    </main>

    <div class="modal hidden" id="modal">
        <div class="modal-body">
            <h2 id="modalTitle">Add Card</h2>
            <input id="cardTitle" type="text" placeholder="Title">
            <textarea id="cardDesc" rows="4" placeholder="Description"></textarea>
            <div class="actions">
                <button class="btn hidden" id="deleteCard">Delete</button>
                <button class="btn" id="cancelCard">Cancel</button>
                <button class="btn" id="saveCard">Save</button>
            </div>
        </div>
    </div>

    <script>
        let cards = [];
        let editingCard = null;
        let targetStatus = 'todo';

        const modal = document.getElementById('modal');
        const modalTitle = document.getElementById('modalTitle');
        const cardTitleInput = document.getElementById('cardTitle');
        const cardDescInput = document.getElementById('cardDesc');
        const deleteBtn = document.getElementById('deleteCard');

        document.addEventListener('DOMContentLoaded', () => {{
            setupEventListeners();
            refresh();
        }});

        async function api(method, url, body) {{
            const options = {{ method, headers: {{ 'Content-Type': 'application/json' }} }};
            if (body !== undefined) options.body = JSON.stringify(body);
            const response = await fetch(url, options);
            if (response.status === 507) {{
                const data = await response.json();
                alert('Could not save: ' + data.error);
            }}
            return response;
        }}

        async function refresh() {{
            const [list, board] = await Promise.all([
                fetch('/api/cards').then(r => r.json()),
                fetch('/api/board').then(r => r.json())
            ]);
            cards = list.cards;
            Object.entries(board.columns).forEach(([status, column]) => {{
                const container = document.querySelector(`.cards[data-status="${{status}}"]`);
                if (container) container.innerHTML = column.html;
                const badge = document.querySelector(`.column[data-status="${{status}}"] .count`);
                if (badge) badge.textContent = column.count;
            }});
            bindCards();
        }}

        function setupEventListeners() {{
            document.querySelectorAll('.add-card').forEach(btn => {{
                btn.addEventListener('click', () => openModal(btn.dataset.status));
            }});

            document.getElementById('saveCard').addEventListener('click', saveCard);
            document.getElementById('cancelCard').addEventListener('click', closeModal);
            deleteBtn.addEventListener('click', deleteCard);

            modal.addEventListener('click', (e) => {{
                if (e.target === modal) closeModal();
            }});

            document.addEventListener('keydown', (e) => {{
                if (e.key === 'Escape') closeModal();
                if (e.key === 'Enter' && e.ctrlKey && !modal.classList.contains('hidden')) {{
                    saveCard();
                }}
            }});

            document.getElementById('clearAll').addEventListener('click', async () => {{
                if (cards.length === 0) return;
                if (confirm('Are you sure you want to delete all cards?')) {{
                    await api('DELETE', '/api/cards?confirm=true');
                    refresh();
                }}
            }});

            document.querySelectorAll('.cards').forEach(container => {{
                container.addEventListener('dragover', (e) => {{
                    e.preventDefault();
                    container.classList.add('drag-over');
                }});

                container.addEventListener('dragleave', () => {{
                    container.classList.remove('drag-over');
                }});

                container.addEventListener('drop', async (e) => {{
                    e.preventDefault();
                    container.classList.remove('drag-over');

                    const cardId = e.dataTransfer.getData('text/plain');
                    const newStatus = container.dataset.status;
                    const card = cards.find(c => c.id === cardId);
                    if (card && card.status !== newStatus) {{
                        await api('POST', `/api/cards/${{encodeURIComponent(cardId)}}/move`, {{ status: newStatus }});
                        refresh();
                    }}
                }});
            }});
        }}

        function bindCards() {{
            document.querySelectorAll('.card').forEach(cardEl => {{
                const card = cards.find(c => c.id === cardEl.dataset.id);
                if (!card) return;

                cardEl.addEventListener('click', () => openModal(card.status, card));

                cardEl.addEventListener('dragstart', (e) => {{
                    cardEl.classList.add('dragging');
                    e.dataTransfer.setData('text/plain', card.id);
                }});

                cardEl.addEventListener('dragend', () => {{
                    cardEl.classList.remove('dragging');
                }});
            }});
        }}

        function openModal(status, card = null) {{
            editingCard = card;
            modal.classList.remove('hidden');

            if (card) {{
                modalTitle.textContent = 'Edit Card';
                cardTitleInput.value = card.title;
                cardDescInput.value = card.description || '';
                deleteBtn.classList.remove('hidden');
            }} else {{
                modalTitle.textContent = 'Add Card';
                cardTitleInput.value = '';
                cardDescInput.value = '';
                deleteBtn.classList.add('hidden');
                targetStatus = status;
            }}

            cardTitleInput.focus();
        }}

        function closeModal() {{
            modal.classList.add('hidden');
            editingCard = null;
            cardTitleInput.value = '';
            cardDescInput.value = '';
        }}

        async function saveCard() {{
            const title = cardTitleInput.value.trim();
            if (!title) {{
                cardTitleInput.focus();
                return;
            }}
            const description = cardDescInput.value.trim();

            if (editingCard) {{
                await api('PUT', `/api/cards/${{encodeURIComponent(editingCard.id)}}`, {{ title, description }});
            }} else {{
                await api('POST', '/api/cards', {{ title, description, status: targetStatus }});
            }}

            closeModal();
            refresh();
        }}

        async function deleteCard() {{
            if (editingCard && confirm('Delete this card?')) {{
                await api('DELETE', `/api/cards/${{encodeURIComponent(editingCard.id)}}`);
                closeModal();
                refresh();
            }}
        }}
    </script>
</body>
</html>
"""

    def run(self) -> None:
        """Start the web server."""
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level="info" if self.config.debug else "warning"
        )


def create_app(
    board: Optional[KanbanBoard] = None,
    config: Optional[WebConfig] = None,
    store: Optional[CardStore] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        board: KanbanBoard to serve (built from store when omitted)
        config: Web configuration
        store: CardStore used when board is omitted

    Returns:
        FastAPI application
    """
    if board is None:
        if store is None:
            raise ValueError("create_app needs a board or a store")
        board = KanbanBoard(store)
    return KanbanWeb(board, config).app


def run_server(
    board: KanbanBoard,
    port: int = 8080,
    host: str = "127.0.0.1",
    debug: bool = False,
    title: str = "Kanban Board",
) -> None:
    """
    Start the web server.

    Args:
        board: Board to serve
        port: Port
        host: Host
        debug: Debug logging
        title: Page title
    """
    if not HAS_FASTAPI:
        print("FastAPI is required for the web board.")
        print("Install with: pip install fastapi uvicorn")
        return

    config = WebConfig(title=title, host=host, port=port, debug=debug)
    logger.info(f"[WEB] serving | host={host} port={port}")
    KanbanWeb(board, config).run()
