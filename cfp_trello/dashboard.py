"""
Status endpoint for CFP to Trello.
Small JSON API to follow an import from another terminal or a browser.
"""

import logging
from datetime import datetime

from flask import Flask, jsonify, request

from .progress import ProgressLog
from .trello_models import Board

logger = logging.getLogger(__name__)


def create_app(progress: ProgressLog, boards: list[Board]) -> Flask:
    """Build the app over the progress log and the board list of a running import."""
    app = Flask(__name__)

    @app.route('/api/progress')
    def get_progress():
        """Progress lines of the current run."""
        return jsonify({
            "lines": progress.get_lines(),
            "last_updated": datetime.now().isoformat(),
        })

    @app.route('/api/progress/recent')
    def get_recent_progress():
        """Last timestamped progress lines, 20 by default."""
        limit = request.args.get("limit", 20, type=int)
        return jsonify(progress.get_entries(limit))

    @app.route('/api/boards')
    def get_boards():
        """Boards completed so far."""
        return jsonify([
            {"id": board.id, "name": board.name, "url": board.url}
            for board in list(boards)
        ])

    @app.route('/health')
    def health():
        """Health check endpoint."""
        return jsonify({"status": "healthy", "timestamp": datetime.now().isoformat()})

    return app


def run_dashboard(app: Flask, host: str = "127.0.0.1", port: int = 8080) -> None:
    """Run the status server."""
    logger.info(f"Starting status endpoint on http://{host}:{port}")
    app.run(host=host, port=port, debug=False, use_reloader=False, threaded=True)
