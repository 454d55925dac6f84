# feecast/api/app.py
from __future__ import annotations

import asyncio

from flask import Flask, Response, jsonify, request

from feecast.api.decorators import handle_service_errors
from feecast.api.schemas import parse_recommend_query
from feecast.observability.metrics import MetricRecorder
from feecast.services.fee_service import FeeService
from feecast.training.pipeline import TrainingPipeline


def create_app(
        service: FeeService,
        trainer: TrainingPipeline,
        metrics: MetricRecorder,
) -> Flask:
    """
    Flask app over an already-wired FeeService / TrainingPipeline.

    Views are sync; each async service call runs in its own event loop.
    """
    app = Flask(__name__)

    @app.get("/health")
    def health():
        return jsonify({"ok": True, "modelReady": service.store.ready})

    @app.get("/metrics")
    def metrics_view():
        return Response(metrics.export(), content_type=metrics.content_type)

    @app.get("/recommend-fee")
    @handle_service_errors
    def recommend_fee():
        priority = parse_recommend_query(request.args)
        rec = asyncio.run(service.recommend(priority))
        return jsonify(rec.to_dict())

    @app.post("/train")
    @handle_service_errors
    def train():
        payload = request.get_json(silent=True) or {}
        block_window = payload.get("blockWindow")
        if block_window is not None:
            if not isinstance(block_window, int) or isinstance(block_window, bool) or block_window < 1:
                return jsonify({"error": "blockWindow must be a positive integer"}), 400

        summary = asyncio.run(trainer.bootstrap(block_window=block_window))
        return jsonify(summary.to_dict())

    @app.get("/network")
    @handle_service_errors
    def network():
        return jsonify(asyncio.run(service.network_meta()))

    @app.get("/provider-fee")
    @handle_service_errors
    def provider_fee():
        return jsonify(asyncio.run(service.provider_fee_fallback_gwei()))

    return app
