from datetime import datetime
import logging
import os
import re
from flask import Flask, g, jsonify, request
from flask_cors import CORS
from db import init_db, make_engine, make_session_factory
from errors import TrackerError, ValidationError
import activities
import errands
import history
from rhythms import rhythm_from_dict
from status import load_activity_status, load_all_statuses

logger = logging.getLogger(__name__)


# ---------- Helpers ----------
def parse_lenient_iso(s: str | None):
    """
    Accepts '2025-09-07T18:30:00', '...Z', '...+02:00', or even the bad '...+00:00Z'.
    Returns a naive local datetime, the form timestamps are stored in.
    """
    if not s:
        return None
    s = s.strip()
    if s.endswith("Z") and re.search(r"[+-]\d{2}:?\d{2}$", s[:-1]):
        s = s[:-1]                     # drop the stray Z if an offset is present
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"          # make 'Z' parseable

    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        raise ValidationError(f"Invalid timestamp: {s}")

    if dt.tzinfo:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def _int_field(data, key, default=None):
    raw = data.get(key, default)
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object body")
    return data


def _now_arg():
    return parse_lenient_iso(request.args.get("now")) or datetime.now()


def create_app(db_url: str | None = None):
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    CORS(app)

    engine = make_engine(db_url)
    init_db(engine)
    SessionLocal = make_session_factory(engine)
    app.config["SESSION_FACTORY"] = SessionLocal

    def get_db():
        if "db" not in g:
            g.db = SessionLocal()
        return g.db

    @app.teardown_appcontext
    def close_db(_exc):
        db = g.pop("db", None)
        if db is not None:
            db.close()

    @app.errorhandler(TrackerError)
    def handle_tracker_error(err):
        logger.warning("%s: %s", type(err).__name__, err)
        return jsonify({"error": str(err)}), err.status_code

    # ---------- Activities ----------
    @app.get("/api/activities")
    def list_activities():
        db = get_db()
        q = request.args.get("q")
        if q:
            rows = activities.search_activities(db, q)
        else:
            rows = activities.list_activities(db, framing=request.args.get("framing"))
        return jsonify([a.to_dict() for a in rows])

    @app.post("/api/activities")
    def create_activity():
        db = get_db()
        data = _json_body()
        framing = data.get("framing", "pursuit")
        a = activities.create_activity_with_rhythm(
            db,
            name=data.get("name", ""),
            framing=framing,
            rhythm=rhythm_from_dict(data.get("rhythm")),
            target=_int_field(data, "target", 1),
            measurement=data.get("measurement", "instances"),
        )
        return jsonify(a.to_dict()), 201

    @app.get("/api/activities/<int:activity_id>")
    def get_activity(activity_id: int):
        a = activities.require_activity(get_db(), activity_id)
        return jsonify(a.to_dict())

    @app.put("/api/activities/<int:activity_id>")
    def update_activity(activity_id: int):
        db = get_db()
        data = _json_body()
        changes = {k: data[k] for k in activities.EDITABLE_FIELDS if k in data}
        if "target" in changes:
            changes["target"] = _int_field(data, "target")
        # parse everything before touching the row
        rhythm = rhythm_from_dict(data["rhythm"]) if "rhythm" in data else None
        a = activities.edit_activity(db, activity_id, changes, rhythm=rhythm)
        if a is None:
            return jsonify({"error": "Not found"}), 404
        return jsonify(a.to_dict())

    @app.put("/api/activities/<int:activity_id>/rhythm")
    def replace_rhythm(activity_id: int):
        a = activities.replace_rhythm(get_db(), activity_id, rhythm_from_dict(_json_body()))
        return jsonify(a.to_dict())

    @app.delete("/api/activities/<int:activity_id>")
    def delete_activity(activity_id: int):
        if not activities.delete_activity(get_db(), activity_id):
            return jsonify({"error": "Not found"}), 404
        return jsonify({"ok": True})

    # ---------- Logging progress ----------
    @app.post("/api/activities/<int:activity_id>/complete")
    def complete_activity(activity_id: int):
        db = get_db()
        data = request.get_json(silent=True) or {}
        ev = history.record_completion(db, activity_id, parse_lenient_iso(data.get("timestamp")))
        return jsonify(ev.to_dict()), 201

    @app.post("/api/activities/<int:activity_id>/duration")
    def log_duration(activity_id: int):
        db = get_db()
        data = _json_body()
        minutes = _int_field(data, "minutes")
        if minutes is None:
            raise ValidationError("minutes is required")
        ev = history.record_duration(db, activity_id, minutes, parse_lenient_iso(data.get("timestamp")))
        return jsonify(ev.to_dict()), 201

    @app.get("/api/activities/<int:activity_id>/history")
    def activity_history(activity_id: int):
        db = get_db()
        activities.require_activity(db, activity_id)
        events = history.get_activity_history(
            db,
            activity_id,
            start=parse_lenient_iso(request.args.get("from")),
            end=parse_lenient_iso(request.args.get("to")),
            limit=_int_field(request.args, "limit"),
        )
        return jsonify([e.to_dict() for e in events])

    @app.get("/api/history")
    def recent_history():
        events = history.get_recent_history(get_db(), limit=_int_field(request.args, "limit", 10))
        return jsonify([e.to_dict() for e in events])

    @app.delete("/api/history/<int:event_id>")
    def delete_history_event(event_id: int):
        if not history.delete_history_event(get_db(), event_id):
            return jsonify({"error": "Not found"}), 404
        return jsonify({"ok": True})

    # ---------- Status ----------
    @app.get("/api/status")
    def all_statuses():
        items = load_all_statuses(get_db(), _now_arg())
        return jsonify([i.to_dict() for i in items])

    @app.get("/api/activities/<int:activity_id>/status")
    def activity_status(activity_id: int):
        item = load_activity_status(get_db(), activity_id, _now_arg())
        if item is None:
            return jsonify({"error": "Not found"}), 404
        return jsonify(item.to_dict())

    # ---------- Errands ----------
    @app.get("/api/errands")
    def list_errands():
        include_expired = request.args.get("all", "").lower() in ("1", "true", "yes")
        rows = errands.list_errands(get_db(), include_expired=include_expired, now=_now_arg())
        return jsonify([e.to_dict() for e in rows])

    @app.post("/api/errands")
    def create_errand():
        e = errands.create_errand(get_db(), _json_body().get("name", ""))
        return jsonify(e.to_dict()), 201

    @app.post("/api/errands/<int:errand_id>/complete")
    def complete_errand(errand_id: int):
        data = request.get_json(silent=True) or {}
        e = errands.complete_errand(get_db(), errand_id, parse_lenient_iso(data.get("timestamp")))
        return jsonify(e.to_dict())

    @app.delete("/api/errands/<int:errand_id>")
    def delete_errand(errand_id: int):
        if not errands.delete_errand(get_db(), errand_id):
            return jsonify({"error": "Not found"}), 404
        return jsonify({"ok": True})

    return app


if __name__ == "__main__":
    port = int(os.getenv("PORT", 8000))
    create_app().run(host="0.0.0.0", port=port, debug=False)
