"""
main.py — Shortest-Path Recorder JSON API (Flask)
===================================================
A thin web shell around the recorder.  It holds one Playback
Controller per browser session and never reads engine internals.

Routes:
  GET  /api/algorithms         – registered engines + pseudocode
  GET  /api/graph              – the session's graph
  POST /api/graph              – load a graph from {nodes, edges}
  POST /api/graph/generate     – seeded random graph
  POST /api/run                – run {algo_key, source} to completion
  POST /api/compare            – Dijkstra vs Bellman-Ford metrics on {source}
  GET  /api/step               – current step
  POST /api/step/next          – advance one step
  POST /api/step/prev          – rewind one step
  POST /api/step/forward       – skip to the next significant step
  POST /api/step/goto          – jump to step {index}
  POST /api/step/reset         – back to "not started"
  GET  /api/result             – final answer of the run

State management:
  The signed Flask session cookie only carries an opaque session id.
  Graphs and Steppers live in an in-memory store keyed by that id, so
  each session owns exactly one cursor.  The store is capped at
  PATHTRACE_MAX_SESSIONS entries; the least recently used is evicted.
"""

import logging
import secrets
from collections import OrderedDict
from dataclasses import asdict, dataclass
from typing import Optional

from flask import Flask, jsonify, request, session

from config import Settings, load_settings
from graph import Graph, InvalidWeightError, UnknownNodeError
from algorithms import get_algorithm, list_algorithms
from engine import Cancelled, OutOfRangeError, Stepper, compare, record
from engine.recorder import Recorder, compute_metrics


_LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Per-session state
# ---------------------------------------------------------------------------
@dataclass
class SessionState:
    graph:   Optional[Graph]   = None
    stepper: Optional[Stepper] = None


class SessionStore:
    """
    Least-recently-used map of session id → SessionState.  Once more than
    `capacity` sessions exist the stalest one is dropped; its cookie then
    simply starts a fresh session.
    """

    def __init__(self, capacity: int = 1000):
        self.capacity = capacity
        self._states: "OrderedDict[str, SessionState]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._states)

    def current(self) -> SessionState:
        sid = session.get("sid")
        if sid is not None and sid in self._states:
            self._states.move_to_end(sid)
            return self._states[sid]

        sid = secrets.token_hex(16)
        session["sid"] = sid
        self._states[sid] = SessionState(graph=Graph.generate_random(num_nodes=6, seed=42))
        while len(self._states) > self.capacity:
            evicted, _ = self._states.popitem(last=False)
            _LOGGER.debug("Evicted session %s", evicted)
        return self._states[sid]


class ApiError(Exception):
    def __init__(self, message: str, status: int = 400, **extra):
        super().__init__(message)
        self.status = status
        self.extra  = extra


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------
def _step_payload(stepper: Stepper) -> dict:
    return {
        "position":    stepper.position,
        "total_steps": stepper.length,
        "state":       stepper.state.value,
        "step":        stepper.current().to_dict(),
    }


def _require_stepper(state: SessionState) -> Stepper:
    if state.stepper is None:
        raise ApiError("No run in this session. POST /api/run first.", status=409)
    return state.stepper


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _flag(data: dict, key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ApiError(f"{key} must be true or false, got {value!r}")
    return value


def _source_from(data: dict) -> int:
    if data.get("source") is None:
        raise ApiError("Set a source node first")
    try:
        return int(data["source"])
    except (TypeError, ValueError) as exc:
        raise ApiError(f"Invalid source: {data['source']!r}") from exc


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------
def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or load_settings()

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    store = SessionStore(capacity=settings.max_sessions)
    app.extensions["pathtrace"] = store

    def check_size(graph: Graph) -> Graph:
        if graph.node_count() > settings.max_nodes:
            raise ApiError(f"Graph has {graph.node_count()} nodes; limit is {settings.max_nodes}")
        return graph

    # -------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------
    @app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError):
        return jsonify({"error": str(exc), **exc.extra}), exc.status

    @app.errorhandler(InvalidWeightError)
    def handle_invalid_weight(exc: InvalidWeightError):
        return jsonify({"error": str(exc), "kind": "invalid_weight", "edge": exc.edge.to_dict()}), 400

    @app.errorhandler(UnknownNodeError)
    def handle_unknown_node(exc: UnknownNodeError):
        return jsonify({"error": str(exc), "kind": "unknown_node", "node": exc.node_id}), 400

    @app.errorhandler(OutOfRangeError)
    def handle_out_of_range(exc: OutOfRangeError):
        return jsonify({"error": str(exc), "kind": "out_of_range", "length": exc.length}), 400

    # -------------------------------------------------------------------
    # Algorithms
    # -------------------------------------------------------------------
    @app.route("/api/algorithms")
    def api_algorithms():
        return jsonify([
            {
                "key":               a.key,
                "label":             a.label,
                "supports_negative": a.supports_negative,
                "complexity_time":   a.complexity_time,
                "complexity_space":  a.complexity_space,
                "description":       a.description,
                "pseudocode":        a.pseudocode,
            }
            for a in list_algorithms()
        ])

    # -------------------------------------------------------------------
    # Graph
    # -------------------------------------------------------------------
    @app.route("/api/graph", methods=["GET"])
    def api_graph_get():
        return jsonify(store.current().graph.to_dict())

    @app.route("/api/graph", methods=["POST"])
    def api_graph_load():
        data = _json_body()
        try:
            graph = Graph.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise ApiError(f"Malformed graph: {exc}") from exc
        state = store.current()
        state.graph   = check_size(graph)
        state.stepper = None
        return jsonify(graph.to_dict())

    @app.route("/api/graph/generate", methods=["POST"])
    def api_graph_generate():
        data = _json_body()
        try:
            num_nodes = int(data.get("nodes", 8))
            edge_probability = float(data.get("prob", 0.3))
            negative_chance = float(data.get("negative_chance", 0.0))
        except (TypeError, ValueError) as exc:
            raise ApiError(str(exc)) from exc
        # generation is quadratic, so refuse oversized requests up front
        if num_nodes > settings.max_nodes:
            raise ApiError(f"Graph has {num_nodes} nodes; limit is {settings.max_nodes}")

        try:
            graph = Graph.generate_random(
                num_nodes=num_nodes,
                edge_probability=edge_probability,
                negative_chance=negative_chance,
                directed=_flag(data, "directed", True),
                seed=data.get("seed"),
                negative_cycle=_flag(data, "negative_cycle", False),
            )
        except (TypeError, ValueError) as exc:
            raise ApiError(str(exc)) from exc
        state = store.current()
        state.graph   = graph
        state.stepper = None
        return jsonify(graph.to_dict())

    # -------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------
    @app.route("/api/run", methods=["POST"])
    def api_run():
        data  = _json_body()
        state = store.current()

        algo_key = data.get("algo_key", "dijkstra")
        info = get_algorithm(algo_key)
        if info is None:
            raise ApiError(f"Unknown algorithm: {algo_key}", status=404)
        source = _source_from(data)

        # a new run always replaces the old controller
        state.stepper = None
        outcome = record(algo_key, state.graph, source, early_stop=settings.early_stop)
        if isinstance(outcome, Cancelled):
            raise ApiError("Run cancelled", status=409)

        state.stepper = Stepper(outcome, speed=settings.speed)
        _LOGGER.info("Session run: %s from %s, %d steps", algo_key, source, len(outcome))
        payload = _step_payload(state.stepper)
        payload["metrics"] = asdict(compute_metrics(outcome, info))
        return jsonify(payload)

    @app.route("/api/compare", methods=["POST"])
    def api_compare():
        state  = store.current()
        source = _source_from(_json_body())

        left, right = Recorder(), Recorder()
        left.start("dijkstra", state.graph, source)
        right.start("bellman_ford", state.graph, source, early_stop=settings.early_stop)
        left.run_to_completion()
        right.run_to_completion()
        return jsonify(asdict(compare(left, right)))

    # -------------------------------------------------------------------
    # Step navigation
    # -------------------------------------------------------------------
    @app.route("/api/step", methods=["GET"])
    def api_step_current():
        return jsonify(_step_payload(_require_stepper(store.current())))

    @app.route("/api/step/next", methods=["POST"])
    def api_step_next():
        stepper = _require_stepper(store.current())
        stepper.next()
        return jsonify(_step_payload(stepper))

    @app.route("/api/step/prev", methods=["POST"])
    def api_step_prev():
        stepper = _require_stepper(store.current())
        stepper.previous()
        return jsonify(_step_payload(stepper))

    @app.route("/api/step/forward", methods=["POST"])
    def api_step_forward():
        stepper = _require_stepper(store.current())
        stepper.forward()
        return jsonify(_step_payload(stepper))

    @app.route("/api/step/goto", methods=["POST"])
    def api_step_goto():
        stepper = _require_stepper(store.current())
        idx = _json_body().get("index")
        if not isinstance(idx, int) or isinstance(idx, bool):
            raise ApiError("index must be an integer")
        stepper.seek(idx)
        return jsonify(_step_payload(stepper))

    @app.route("/api/step/reset", methods=["POST"])
    def api_step_reset():
        stepper = _require_stepper(store.current())
        stepper.reset()
        return jsonify(_step_payload(stepper))

    @app.route("/api/result", methods=["GET"])
    def api_result():
        stepper = _require_stepper(store.current())
        result = stepper.trace.result()
        payload = result.to_dict()
        payload["status"] = "negative_cycle" if result.negative_cycle else "success"
        return jsonify(payload)

    return app


if __name__ == "__main__":
    _settings = load_settings()
    logging.basicConfig(
        level=_settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print("=" * 60)
    print("  Shortest-Path Recorder API")
    print("  Open http://localhost:5000/api/algorithms")
    print("=" * 60)
    create_app(_settings).run(debug=False, host="0.0.0.0", port=5000)
