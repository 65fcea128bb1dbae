"""
Task board JSON API.

Exposes the controller's command surface over HTTP. Rendering is left to
whatever client consumes this API.

API:
    GET    /api/board                                → sections, tasks, flags, stats
    POST   /api/sections                 {title}     → add section
    PATCH  /api/sections/<id>            {title}     → rename section
    DELETE /api/sections/<id>                        → delete section (and its tasks)
    POST   /api/sections/reorder         {ids}       → reorder sections
    POST   /api/sections/<id>/tasks      {title, description?} → add task
    PATCH  /api/sections/<id>/tasks/<task_id>        → update task
    DELETE /api/sections/<id>/tasks/<task_id>        → delete task
    POST   /api/sections/<id>/tasks/reorder {ids}    → reorder tasks
    POST   /api/tasks/move   {source, dest, sourceIndex, destIndex} → move task
    POST   /api/drag         drag result             → resolve and apply a drag
    POST   /api/search       {query}                 → set search query
    GET    /health
"""
import logging

from flask import Flask, jsonify, request

from .controller import BoardController
from .drag import DragResult
from .errors import NotFound, OutOfRange, ValidationError

logger = logging.getLogger(__name__)


def _payload() -> dict:
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def _int_field(data: dict, key: str) -> int:
    try:
        return int(data[key])
    except (KeyError, TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")


def create_app(controller: BoardController) -> Flask:
    app = Flask(__name__)

    def board_json():
        board = controller.board
        return {
            "sections": [s.to_dict() for s in controller.sections],
            "tasks": {
                s.id: [t.to_dict() for t in board.tasks_for(s.id)]
                for s in board.sections
            },
            "filteredTasks": {
                s.id: [t.to_dict() for t in controller.filtered_tasks_for(s.id)]
                for s in board.sections
            },
            "isSaving": controller.is_saving,
            "error": controller.error,
            "searchQuery": controller.search_query,
            "stats": controller.stats(),
            "summary": controller.search_summary(),
        }

    def result(applied: bool, status: int = 200):
        if not applied:
            return jsonify({"error": controller.error or "save failed"}), 503
        return jsonify(board_json()), status

    # ── Error mapping ────────────────────────────────────────────────────────

    @app.errorhandler(ValidationError)
    @app.errorhandler(OutOfRange)
    def bad_request(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(NotFound)
    def not_found(e):
        return jsonify({"error": str(e)}), 404

    # ── Routes ───────────────────────────────────────────────────────────────

    @app.route("/api/board")
    def api_board():
        return jsonify(board_json())

    @app.route("/api/sections", methods=["POST"])
    def api_add_section():
        data = _payload()
        return result(controller.add_section(data.get("title", "")), 201)

    @app.route("/api/sections/reorder", methods=["POST"])
    def api_reorder_sections():
        ids = _payload().get("ids")
        if not isinstance(ids, list):
            raise ValidationError("ids must be a list")
        return result(controller.reorder_sections(ids))

    @app.route("/api/sections/<section_id>", methods=["PATCH"])
    def api_update_section(section_id):
        data = _payload()
        return result(controller.update_section(section_id, data.get("title", "")))

    @app.route("/api/sections/<section_id>", methods=["DELETE"])
    def api_delete_section(section_id):
        return result(controller.delete_section(section_id))

    @app.route("/api/sections/<section_id>/tasks", methods=["POST"])
    def api_add_task(section_id):
        data = _payload()
        return result(controller.add_task(
            section_id, data.get("title", ""), data.get("description", "")
        ), 201)

    @app.route("/api/sections/<section_id>/tasks/reorder", methods=["POST"])
    def api_reorder_tasks(section_id):
        ids = _payload().get("ids")
        if not isinstance(ids, list):
            raise ValidationError("ids must be a list")
        return result(controller.reorder_tasks(section_id, ids))

    @app.route("/api/sections/<section_id>/tasks/<task_id>", methods=["PATCH"])
    def api_update_task(section_id, task_id):
        return result(controller.update_task(section_id, task_id, _payload()))

    @app.route("/api/sections/<section_id>/tasks/<task_id>", methods=["DELETE"])
    def api_delete_task(section_id, task_id):
        return result(controller.delete_task(section_id, task_id))

    @app.route("/api/tasks/move", methods=["POST"])
    def api_move_task():
        data = _payload()
        if not data.get("source") or not data.get("dest"):
            raise ValidationError("source and dest are required")
        return result(controller.move_task(
            str(data["source"]),
            str(data["dest"]),
            _int_field(data, "sourceIndex"),
            _int_field(data, "destIndex"),
        ))

    @app.route("/api/drag", methods=["POST"])
    def api_drag():
        try:
            drag = DragResult.from_dict(_payload())
        except (TypeError, ValueError) as e:
            raise ValidationError(f"malformed drag result: {e}")
        if not drag.has_destination or drag.is_same_position:
            return jsonify(board_json())
        return result(controller.handle_drag(drag))

    @app.route("/api/search", methods=["POST"])
    def api_search():
        controller.set_search_query(str(_payload().get("query") or ""))
        return jsonify(board_json())

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "isSaving": controller.is_saving})

    return app
