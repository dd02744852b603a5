"""HTTP endpoints that run text-processing workflows."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from flask import Flask, jsonify, request

from gadflow.orchestrator import (
    Orchestrator,
    StepSpec,
    WorkflowError,
    WorkflowNotBuiltError,
    step as flow_step,
)
from gadflow.workflow import (
    INPUT_KEY,
    LOWERCASE_RESULT_KEY,
    REVERSE_RESULT_KEY,
    TRIMMED_RESULT_KEY,
    UPPERCASE_KEY,
    Increase,
    Lowercase,
    Reverse,
    SharedData,
    Trim,
    Uppercase,
)

INVALID_INPUT = "invalid input"
PROCESSING_FAILED = "failed to process input"

_StepBuilder = Callable[[SharedData], List[StepSpec]]


class Handlers:
    """Request handlers, each running one workflow over the posted text."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        base = logger if logger is not None else logging.getLogger(__name__)
        self._logger = base.getChild("handlers")

    def register_routes(self, app: Flask) -> None:
        """Attach every handler to the application."""
        app.add_url_rule("/trim", view_func=self.trim, methods=["POST"])
        app.add_url_rule("/uppercase", view_func=self.uppercase, methods=["POST"])
        app.add_url_rule(
            "/uppercase-with-increase",
            view_func=self.uppercase_with_increase,
            methods=["POST"],
        )
        app.add_url_rule("/all", view_func=self.all, methods=["POST"])

    def _bind_text(self) -> Optional[str]:
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return None
        text = payload.get("text")
        if not isinstance(text, str) or not text:
            return None
        return text

    def _execute(self, build: _StepBuilder, outputs: Dict[str, str], label: str):
        text = self._bind_text()
        if text is None:
            self._logger.error("invalid input")
            return jsonify(error=INVALID_INPUT), 400

        shared: SharedData = {INPUT_KEY: text}
        orchestrator = Orchestrator(self._logger, *build(shared))
        orchestrator.build()
        try:
            orchestrator.run()
        except (WorkflowError, WorkflowNotBuiltError) as exc:
            self._logger.error("failed to execute %s workflow: %s", label, exc)
            return jsonify(error=PROCESSING_FAILED), 500

        self._logger.debug("shared data: %r", shared)

        result: Dict[str, str] = {}
        for response_key, shared_key in outputs.items():
            value = shared.get(shared_key)
            if not isinstance(value, str):
                self._logger.error("failed to retrieve %s result", shared_key)
                return jsonify(error=PROCESSING_FAILED), 500
            result[response_key] = value
        return jsonify(result), 200

    def trim(self):
        """Trim surrounding whitespace from the posted text."""

        def build(shared: SharedData) -> List[StepSpec]:
            return [flow_step(Trim(shared))]

        return self._execute(build, {"trimmed_text": TRIMMED_RESULT_KEY}, "trim")

    def uppercase(self):
        """Trim and upper-case the posted text."""

        def build(shared: SharedData) -> List[StepSpec]:
            trim_step = Trim(shared)
            return [
                flow_step(trim_step),
                flow_step(Uppercase(shared)).depends_on(trim_step),
            ]

        return self._execute(build, {"uppercased_text": UPPERCASE_KEY}, "uppercase")

    def uppercase_with_increase(self):
        """Trim and upper-case the posted text while bumping the run counter."""

        def build(shared: SharedData) -> List[StepSpec]:
            trim_step = Trim(shared)
            return [
                flow_step(trim_step),
                flow_step(Uppercase(shared)).depends_on(trim_step),
                flow_step(Increase()),
            ]

        return self._execute(build, {"uppercased_text": UPPERCASE_KEY}, "uppercase")

    def all(self):
        """Run every text step and return all their results."""

        def build(shared: SharedData) -> List[StepSpec]:
            trim_step = Trim(shared)
            return [
                flow_step(trim_step),
                flow_step(Uppercase(shared)).depends_on(trim_step),
                flow_step(Lowercase(shared)).depends_on(trim_step),
                flow_step(Reverse(shared)),
                flow_step(Increase()),
            ]

        outputs = {
            "uppercased_text": UPPERCASE_KEY,
            "lowercased_text": LOWERCASE_RESULT_KEY,
            "reversed_text": REVERSE_RESULT_KEY,
        }
        return self._execute(build, outputs, "all")


def create_app(logger: Optional[logging.Logger] = None) -> Flask:
    """Create a Flask application with every workflow route registered."""
    app = Flask(__name__)
    Handlers(logger).register_routes(app)
    return app