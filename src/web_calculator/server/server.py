"""HTTP server exposing the arithmetic dispatcher and its HTML front-end."""
import math
from typing import Any, Mapping, Tuple, Union

from flask import Flask, Response, jsonify, render_template, request
from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress

from web_calculator.common.dispatcher import ArithmeticDispatcher
from web_calculator.common.logger import logger
from web_calculator.common.operations import CalculationRequest, CalculationResult


SERVICE_NAME: str = "web-calculator"


class CalculatorServer(BaseModel):
    """
    Flask application serving the calculator.

    Routes:
        - ``GET /``: HTML form bound to ``/calculate``
        - ``POST /calculate``: JSON or form body with num1, num2, operation
        - ``GET /health``: liveness probe for the container platform
    """

    # Make the Pydantic instance immutable (read-only), the app is built from it once
    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=5000, ge=1, le=65535, description="Server HTTP port")
    debug: bool = Field(default=False, description="Run Flask in debug mode")

    @staticmethod
    def _read_payload() -> Mapping[str, Any]:
        """
        Read the request fields from a JSON object or a form-encoded body.

        Anything else (no body, malformed JSON, a JSON array) yields no fields,
        which the dispatcher reports as missing data.

        :return: Mapping of field names to raw values
        :rtype: Mapping[str, Any]
        """
        if request.is_json:
            data = request.get_json(silent=True)
            return data if isinstance(data, dict) else {}
        return request.form

    @staticmethod
    def _json_number(value: float) -> Union[float, str]:
        """
        Make a result safe for strict JSON.

        Results that overflow to infinity are sent as the strings ``"Infinity"``
        or ``"-Infinity"``, which ``float()`` parses back.

        :param float value: Computed result

        :return: The value itself when finite, else its string spelling
        :rtype: Union[float, str]
        """
        if math.isfinite(value):
            return value
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"

    @staticmethod
    def _to_response(result: CalculationResult) -> Tuple[Response, int]:
        """
        Convert a dispatcher result into a JSON response and status code.

        :param CalculationResult result: Dispatcher result

        :return: ``({"result": value}, 200)`` or ``({"error": message}, 400)``
        :rtype: Tuple[Response, int]
        """
        if result.ok:
            return jsonify({"result": CalculatorServer._json_number(result.result)}), 200
        return jsonify({"error": result.message}), 400

    def calculate(self) -> Tuple[Response, int]:
        """Handle ``POST /calculate``."""
        payload: Mapping[str, Any] = self._read_payload()
        calc_request = CalculationRequest(
            num1=payload.get("num1"),
            num2=payload.get("num2"),
            operation=payload.get("operation"),
        )
        logger.info(
            "🧮 Calculation request: %r %r %r",
            calc_request.num1,
            calc_request.operation,
            calc_request.num2,
        )

        result: CalculationResult = ArithmeticDispatcher.dispatch_request(calc_request)
        if result.ok:
            logger.info("🧮✅ Result: %s", result.result)
        else:
            logger.warning("🧮❌ Rejected (%s): %s", result.error.value, result.message)
        return self._to_response(result)

    def create_app(self) -> Flask:
        """
        Build the Flask application and register its routes.

        :return: Configured Flask application
        :rtype: Flask
        """
        app = Flask(__name__)

        @app.route("/", methods=["GET"])
        def index() -> str:
            return render_template("index.html")

        @app.route("/calculate", methods=["POST"])
        def calculate() -> Tuple[Response, int]:
            return self.calculate()

        @app.route("/health", methods=["GET"])
        def health() -> Tuple[Response, int]:
            return jsonify({"status": "UP", "service": SERVICE_NAME}), 200

        return app

    def start(self) -> None:
        """
        Start the HTTP server on the configured host and port.

        Blocks until the process is interrupted or terminated.

        :return: None
        """
        logger.info(f"🖥️ Starting server on {self.host}:{self.port}")
        app: Flask = self.create_app()
        app.run(host=str(self.host), port=self.port, debug=self.debug, use_reloader=False)
