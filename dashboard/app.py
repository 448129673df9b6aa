"""
This module contains the Flask application that displays the upcoming pickups.
"""

import logging

from flask import Flask, abort, current_app, jsonify, render_template

from waste_reminder.services.presentation_service import PresentationService

logger = logging.getLogger(__name__)

app = Flask(__name__)


def get_presentation() -> PresentationService:
    """Returns the PresentationService the app was started with."""
    presentation = current_app.config.get("PRESENTATION")
    if presentation is None:
        logger.error("Dashboard started without a PresentationService.")
        abort(503)
    return presentation


@app.route("/")
def index():
    """Renders the list of upcoming pickups with their badges."""
    presentation = get_presentation()
    rows = presentation.rows() if presentation.ready else []
    return render_template(
        "index.html",
        header=presentation.config.header,
        ready=presentation.ready,
        rows=rows,
    )


@app.route("/api/events")
def api_events():
    """Returns the latest published event snapshot."""
    presentation = get_presentation()
    return jsonify(
        {
            "ready": presentation.ready,
            "events": [event.to_dict() for event in presentation.events],
        }
    )


@app.route("/api/pickups")
def api_pickups():
    """Returns the display rows, including due state, and any due alert."""
    presentation = get_presentation()
    if not presentation.ready:
        return jsonify({"ready": False, "pickups": [], "alert": None})

    rows, alert = presentation.evaluate()
    return jsonify(
        {
            "ready": True,
            "pickups": [row.to_dict() for row in rows],
            "alert": (
                {
                    "title": alert.title,
                    "types": list(alert.types),
                    "message": alert.message,
                    "scheduled_at": alert.scheduled_at.isoformat(),
                }
                if alert
                else None
            ),
        }
    )


def run_dashboard(presentation: PresentationService, port: int = 8080) -> None:
    """Serves the dashboard for the given presentation service."""
    app.config["PRESENTATION"] = presentation
    app.run(host="0.0.0.0", port=port)
