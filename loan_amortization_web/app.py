import os

from flask import Flask, jsonify, request

from loan_amortization.engine import calculate
from loan_amortization.errors import ErrorKind, LoanAmortizationError
from loan_amortization.formatter import amortization_to_dict
from loan_amortization.main import loan_from_dict, setup_logging

STATUS_BY_KIND = {
    ErrorKind.INPUT_VALIDATION: 400,
    ErrorKind.ARITHMETIC_INFEASIBLE: 422,
}


def _error(kind: str, message: str, status: int):
    return jsonify({"error": kind, "message": message}), status


def create_app(config: dict | None = None) -> Flask:
    app = Flask(__name__)
    app.config["MAX_TERM_MONTHS"] = int(os.environ.get("MAX_TERM_MONTHS", "1200"))
    if config:
        app.config.update(config)
    setup_logging(os.environ.get("LOAN_AMORTIZATION_LOG_LEVEL", "WARNING"))

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.post("/api/amortization")
    def amortization():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return _error(ErrorKind.INPUT_VALIDATION.value, "Request body must be a JSON object", 400)
        try:
            loan = loan_from_dict(payload)
        except KeyError as exc:
            return _error(ErrorKind.INPUT_VALIDATION.value, f"Missing field: {exc.args[0]}", 400)
        except (TypeError, ValueError, AttributeError) as exc:
            return _error(ErrorKind.INPUT_VALIDATION.value, str(exc), 400)

        if loan.term > app.config["MAX_TERM_MONTHS"]:
            return _error(
                ErrorKind.INPUT_VALIDATION.value,
                f"Term must not exceed {app.config['MAX_TERM_MONTHS']} months",
                400,
            )

        try:
            result = calculate(loan)
        except LoanAmortizationError as exc:
            return _error(exc.kind.value, exc.message, STATUS_BY_KIND[exc.kind])
        return jsonify(amortization_to_dict(result))

    return app


app = create_app()


if __name__ == "__main__":
    print("Starting loan amortization API...")
    app.run(host="0.0.0.0", port=8710, debug=True)
