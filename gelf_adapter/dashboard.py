"""Flask monitoring endpoints for the running adapters."""

from flask import Flask, jsonify

from gelf_adapter.failure_tracker import FailureTracker
from gelf_adapter.metrics import Metrics


def create_dashboard_app(metrics: Metrics, failures: FailureTracker,
                         routes: list[str] | None = None) -> Flask:
    app = Flask(__name__)

    @app.route("/stats")
    def stats():
        snap = metrics.snapshot()
        snap["routes"] = list(routes or [])
        snap["recent_failures"] = failures.get_recent(10)
        return jsonify(snap)

    @app.route("/health")
    def health():
        return jsonify(status="ok")

    return app


def run_dashboard(app: Flask, port: int):
    """Run the Flask app (intended for use in a daemon thread)."""
    app.run(host="0.0.0.0", port=port, use_reloader=False)
