"""
main.py — Algorithm Stepper Flask App
======================================
The web server that exposes the playback engine to a browser.

Routes:
  GET  /                       – minimal control page
  GET  /api/algorithms?tag=T   – registry listing (pseudocode, example inputs, …)
  POST /api/run                – start a paced run   {algorithm, inputs?, delay_ms? | preset?}
  POST /api/pause              – pause at the next step boundary
  POST /api/resume             – resume a paused run
  POST /api/reset              – cancel the run, back to idle
  POST /api/step/next          – deliver one step while paused
  POST /api/seek_end           – deliver every remaining step now
  POST /api/config/speed       – {delay_ms} or {preset}
  GET  /api/state?since=N      – controller state + steps with index >= N (polling)
  POST /api/record             – unpaced run to completion, metrics + full export

State management:
  Single process, single session.  The app owns exactly one
  PlaybackSession (controller + recording consumer) stored in
  app.extensions["stepper"].  The browser polls /api/state; the
  controller keeps pacing on its own timer thread in between.

Configuration:
  StepperConfig defaults, then ALGOSTEP_* environment variables
  (app.config.from_prefixed_env), then the mapping passed to create_app.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from flask import Blueprint, Flask, current_app, jsonify, render_template_string, request

from algorithms import algorithms_by_tag, get_algorithm, list_algorithms, make_producer
from algorithms.errors import InvalidInput, StepperError
from algorithms.producer import StepProducer
from engine import (
    AlreadyRunning,
    PlaybackController,
    RecordingConsumer,
    Recorder,
    StepperConfig,
    ThreadingScheduler,
)
from engine.config import preset_delay
from engine.scheduler import Scheduler

logger = logging.getLogger(__name__)

bp = Blueprint("stepper", __name__)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------
class PlaybackSession:
    """
    Attributes:
        config     : StepperConfig in force.
        consumer   : RecordingConsumer the browser polls.
        controller : The one PlaybackController.
        algo_key   : Algorithm of the current / last run.
    """

    def __init__(self, config: StepperConfig, scheduler: Optional[Scheduler] = None):
        self.config:     StepperConfig      = config
        self.consumer:   RecordingConsumer  = RecordingConsumer()
        self.controller: PlaybackController = PlaybackController.from_config(
            config, self.consumer, scheduler or ThreadingScheduler()
        )
        self.algo_key:   Optional[str]      = None

    def snapshot(self, since: int = 0) -> Dict[str, Any]:
        latest = self.consumer.latest
        error  = self.controller.last_error
        return {
            "algorithm": self.algo_key,
            "state":     self.controller.state.to_dict(),
            "latest":    latest.to_dict() if latest else None,
            "steps":     [s.to_dict() for s in self.consumer.since(since)],
            "error":     str(error) if error else None,
        }

    def check_limits(self, producer: StepProducer) -> None:
        """Reject inputs that would animate for far too long."""
        inputs = producer.inputs
        cfg = self.config
        if producer.key == "floyd_warshall" and len(inputs["matrix"]) > cfg.max_matrix_size:
            raise InvalidInput(f"matrix is larger than {cfg.max_matrix_size}×{cfg.max_matrix_size}")
        if producer.key == "topological_sort" and len(inputs["graph"]) > cfg.max_nodes:
            raise InvalidInput(f"graph has more than {cfg.max_nodes} nodes")
        if producer.key == "fibonacci_memo" and inputs["n"] > cfg.max_fib_n:
            raise InvalidInput(f"n must be at most {cfg.max_fib_n}")
        if producer.key == "trie_prefix" and len(inputs["words"]) > cfg.max_words:
            raise InvalidInput(f"text has more than {cfg.max_words} words")


def get_session() -> PlaybackSession:
    return current_app.extensions["stepper"]


def _payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidInput("request body must be a JSON object")
    return data


def _producer_from(data: Dict[str, Any]) -> StepProducer:
    key = data.get("algorithm")
    info = get_algorithm(key) if isinstance(key, str) else None
    if info is None:
        raise InvalidInput(f"Unknown algorithm: {key}")
    inputs = data.get("inputs", info.example)
    if not isinstance(inputs, dict):
        raise InvalidInput("inputs must be a JSON object")
    return make_producer(key, **inputs)


# ---------------------------------------------------------------------------
# Main UI Route
# ---------------------------------------------------------------------------
@bp.route("/")
def index():
    return render_template_string(INDEX_TEMPLATE, algorithms=list_algorithms())


# ---------------------------------------------------------------------------
# API: Registry
# ---------------------------------------------------------------------------
@bp.route("/api/algorithms")
def api_algorithms():
    tag = request.args.get("tag")
    return jsonify([
        {
            "key":              a.key,
            "label":            a.label,
            "pseudocode":       a.pseudocode,
            "tags":             a.tags,
            "complexity_time":  a.complexity_time,
            "complexity_space": a.complexity_space,
            "description":      a.description,
            "example":          a.example,
        }
        for a in (algorithms_by_tag(tag) if tag else list_algorithms())
    ])


# ---------------------------------------------------------------------------
# API: Run & Playback
# ---------------------------------------------------------------------------
@bp.route("/api/run", methods=["POST"])
def api_run():
    sess = get_session()
    data = _payload()

    producer = _producer_from(data)
    sess.check_limits(producer)

    delay = data.get("delay_ms")
    if "preset" in data:
        delay = preset_delay(data["preset"])

    run_id = sess.controller.start(producer, delay)
    sess.algo_key = producer.key
    logger.info("run %d: %s started", run_id, producer.key)
    return jsonify(sess.snapshot())


@bp.route("/api/pause", methods=["POST"])
def api_pause():
    sess = get_session()
    sess.controller.pause()
    return jsonify(sess.snapshot(since=sess.controller.state.current_index))


@bp.route("/api/resume", methods=["POST"])
def api_resume():
    sess = get_session()
    sess.controller.resume()
    return jsonify(sess.snapshot(since=sess.controller.state.current_index))


@bp.route("/api/reset", methods=["POST"])
def api_reset():
    sess = get_session()
    sess.controller.reset()
    logger.info("playback reset")
    return jsonify(sess.snapshot())


@bp.route("/api/step/next", methods=["POST"])
def api_step_next():
    sess = get_session()
    advanced = sess.controller.step()
    body = sess.snapshot(since=sess.controller.state.current_index)
    body["advanced"] = advanced
    return jsonify(body)


@bp.route("/api/seek_end", methods=["POST"])
def api_seek_end():
    sess = get_session()
    before = sess.controller.state.current_index
    delivered = sess.controller.seek_to_end()
    body = sess.snapshot(since=before + 1)
    body["delivered"] = delivered
    return jsonify(body)


@bp.route("/api/config/speed", methods=["POST"])
def api_config_speed():
    sess = get_session()
    data = _payload()
    if "preset" in data:
        sess.controller.set_speed(data["preset"])
    else:
        sess.controller.set_delay(data.get("delay_ms"))
    return jsonify({"state": sess.controller.state.to_dict()})


@bp.route("/api/state")
def api_state():
    since = request.args.get("since", default=0, type=int)
    return jsonify(get_session().snapshot(since=since))


# ---------------------------------------------------------------------------
# API: Recording
# ---------------------------------------------------------------------------
@bp.route("/api/record", methods=["POST"])
def api_record():
    sess = get_session()
    data = _payload()
    producer = _producer_from(data)
    sess.check_limits(producer)

    rec = Recorder()
    rec.start(producer.key, **producer.inputs)
    rec.run_to_completion()
    return jsonify(rec.export())


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
@bp.app_errorhandler(StepperError)
def handle_stepper_error(exc: StepperError):
    status = 409 if isinstance(exc, AlreadyRunning) else 400
    logger.warning("%s rejected: %s", request.path, exc)
    return jsonify({"error": str(exc), "type": type(exc).__name__}), status


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------
def create_app(
    config: Optional[Mapping[str, Any]] = None,
    scheduler: Optional[Scheduler] = None,
) -> Flask:
    app = Flask(__name__)
    app.config.from_mapping(StepperConfig().to_mapping())
    app.config.from_prefixed_env("ALGOSTEP")
    if config:
        app.config.from_mapping(config)

    stepper_config = StepperConfig.from_mapping(app.config)
    app.extensions["stepper"] = PlaybackSession(stepper_config, scheduler)
    app.register_blueprint(bp)
    return app


# ---------------------------------------------------------------------------
# Template
# ---------------------------------------------------------------------------
INDEX_TEMPLATE = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Algorithm Stepper</title>
  <style>
    body { font-family: system-ui, sans-serif; margin: 2rem; max-width: 60rem; }
    textarea { width: 100%; height: 8rem; font-family: monospace; }
    pre { background: #f4f4f5; padding: 1rem; overflow: auto; }
    button { margin-right: .4rem; }
  </style>
</head>
<body>
  <h1>Algorithm Stepper</h1>
  <select id="algo">
    {% for a in algorithms %}
    <option value="{{ a.key }}" data-example='{{ a.example | tojson }}'>{{ a.label }}</option>
    {% endfor %}
  </select>
  <input id="delay" type="number" min="0" value="400"> ms/step
  <textarea id="inputs"></textarea>
  <p>
    <button onclick="run()">Start</button>
    <button onclick="post('/api/pause')">Pause</button>
    <button onclick="post('/api/resume')">Resume</button>
    <button onclick="post('/api/step/next')">Next</button>
    <button onclick="post('/api/seek_end')">To end</button>
    <button onclick="post('/api/reset')">Reset</button>
  </p>
  <div id="status"></div>
  <pre id="step"></pre>
  <script>
    const algo = document.getElementById('algo');
    const inputs = document.getElementById('inputs');
    function loadExample() {
      inputs.value = JSON.stringify(JSON.parse(algo.selectedOptions[0].dataset.example), null, 1);
    }
    algo.onchange = loadExample;
    loadExample();

    async function post(url, body) {
      const r = await fetch(url, {method: 'POST', headers: {'Content-Type': 'application/json'},
                                  body: JSON.stringify(body || {})});
      const data = await r.json();
      if (data.error) document.getElementById('status').textContent = data.error;
    }
    function run() {
      post('/api/run', {algorithm: algo.value, inputs: JSON.parse(inputs.value),
                        delay_ms: Number(document.getElementById('delay').value)});
    }
    async function poll() {
      const r = await fetch('/api/state?since=999999999');
      const data = await r.json();
      const s = data.state;
      document.getElementById('status').textContent =
        `${s.phase} · step ${s.current_index} · ${s.delay_ms} ms` + (data.error ? ` · ${data.error}` : '');
      document.getElementById('step').textContent = data.latest ? JSON.stringify(data.latest, null, 1) : '';
    }
    setInterval(poll, 200);
  </script>
</body>
</html>
"""


if __name__ == "__main__":
    application = create_app()
    logging.basicConfig(
        level=application.extensions["stepper"].config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    application.run(debug=False, threaded=True)
