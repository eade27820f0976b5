"""Skill endpoints: one per voice-platform protocol."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

logger = logging.getLogger(__name__)

skill_bp = Blueprint('skill_bp', __name__, url_prefix='/api')


def _request_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        logger.warning("Skill request to %s without a JSON object body", request.path)
        return {}
    return body


@skill_bp.route('/alexa', methods=['POST'])
def alexa_directive():
    adapter = current_app.extensions['directive_adapter']
    return jsonify(adapter.handle(_request_body()))


@skill_bp.route('/music-skill', methods=['POST'])
def music_skill():
    adapter = current_app.extensions['remote_resolution_adapter']
    return jsonify(adapter.handle(_request_body()))
