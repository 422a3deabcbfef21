import logging
import traceback
from io import BytesIO

from flask import Blueprint, current_app, jsonify, render_template, request, send_file
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from marshmallow import ValidationError

from .agents import generate_ai_recommendations, generate_chat_reply
from .conversation import default_context, design_inputs_from_collected_info
from .designer import generate_network_design
from .errors import ChatConfigurationError, ChatProxyError
from .exports import (
    DIAGRAM_FORMATS,
    DOCX_MIMETYPE,
    IP_TABLE_FORMATS,
    design_report_docx,
    export_diagram,
    export_ip_table,
)
from .layout import hierarchical_layout
from .schemas import load_chat_request, load_design_from_chat_request, load_design_request
from .topology import normalize_department, normalize_form_data

logger = logging.getLogger(__name__)

network_bp = Blueprint("network", __name__)
limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


def _chat_rate_limit():
    return current_app.config.get("CHAT_RATE_LIMIT", "10 per minute")


def _ai_recommendations(data):
    """Caller-supplied list, or a fresh model suggestion when ``aiAssist`` is set."""
    if data.get("aiRecommendations") or not data["aiAssist"]:
        return data.get("aiRecommendations")
    config = current_app.config
    try:
        return generate_ai_recommendations(
            normalize_form_data(data["formData"]),
            [normalize_department(d) for d in data["departments"]],
            network_type=data["networkType"],
            redundancy=data["redundancy"],
            api_key=config.get("OPENAI_API_KEY"),
            model=config.get("OPENAI_MODEL", "gpt-4o"),
            temperature=config.get("CHAT_TEMPERATURE", 0.7),
            max_tokens=config.get("CHAT_MAX_TOKENS", 512),
        )
    except ChatProxyError as e:
        # The design stands without the AI section
        logger.warning(f"AI recommendations unavailable: {str(e)}")
        return None


def _design_from_request():
    """Validate the JSON body and run the generator. Raises ValidationError."""
    data = load_design_request(request.get_json(silent=True))
    data["aiRecommendations"] = _ai_recommendations(data)
    design = generate_network_design(
        data["formData"],
        data["departments"],
        network_type=data["networkType"],
        redundancy=data["redundancy"],
        security_level=data["securityLevel"],
        ai_recommendations=data.get("aiRecommendations"),
    )
    return data, design


def _validation_error(e: ValidationError):
    logger.warning(f"Validation error: {e.messages}")
    return jsonify({"error": "Invalid input", "details": e.messages}), 400


def _generation_error(e: Exception):
    logger.error(f"Network design generation failed: {str(e)}\n{traceback.format_exc()}")
    return jsonify({"error": "Network design generation failed", "message": str(e)}), 500


@network_bp.route("/", methods=["GET"])
def index():
    return render_template("index.html", default_context=default_context())


@network_bp.route("/healthz", methods=["GET"])
def healthz():
    return jsonify({"status": "ok"})


@network_bp.route("/api/design", methods=["POST"])
def design():
    try:
        data, result = _design_from_request()
        payload = result.to_dict()
        payload["aiRecommendations"] = data["aiRecommendations"] or []
        payload["layout"] = {
            node_id: {"x": x, "y": y} for node_id, (x, y) in hierarchical_layout(result.graph).items()
        }
        return jsonify(payload)
    except ValidationError as e:
        return _validation_error(e)
    except Exception as e:
        return _generation_error(e)


@network_bp.route("/api/design/from-chat", methods=["POST"])
def design_from_chat():
    """Hand extracted chat fields to the generator on a best-effort basis."""
    try:
        body = load_design_from_chat_request(request.get_json(silent=True))
    except ValidationError as e:
        return _validation_error(e)

    inputs = design_inputs_from_collected_info(body["collectedInfo"])
    try:
        result = generate_network_design(inputs["formData"], inputs["departments"])
        return jsonify({"inputs": inputs, **result.to_dict()})
    except Exception as e:
        return _generation_error(e)


@network_bp.route("/api/chat", methods=["POST"])
@limiter.limit(_chat_rate_limit)
def chat():
    try:
        data = load_chat_request(request.get_json(silent=True))
    except ValidationError as e:
        return _validation_error(e)

    config = current_app.config
    try:
        result = generate_chat_reply(
            data["messages"],
            data.get("context"),
            api_key=config.get("OPENAI_API_KEY"),
            model=config.get("OPENAI_MODEL", "gpt-4o"),
            temperature=config.get("CHAT_TEMPERATURE", 0.7),
            max_tokens=config.get("CHAT_MAX_TOKENS", 512),
        )
    except ChatConfigurationError as e:
        logger.error(f"Chat configuration error: {str(e)}")
        return jsonify({"error": str(e)}), 500
    except ChatProxyError as e:
        logger.error(f"Error calling OpenAI: {str(e)}")
        return jsonify({"error": "Failed to generate response", "details": str(e)}), 500
    return jsonify(result)


@network_bp.route("/api/export/diagram/<fmt>", methods=["POST"])
def export_diagram_route(fmt):
    if fmt not in DIAGRAM_FORMATS:
        return jsonify({"error": f"Unsupported diagram format: {fmt}"}), 404
    try:
        _, result = _design_from_request()
        content = export_diagram(result.graph, fmt)
    except ValidationError as e:
        return _validation_error(e)
    except Exception as e:
        return _generation_error(e)

    mimetype, filename = DIAGRAM_FORMATS[fmt]
    logger.info(f"Diagram exported as {fmt}")
    return send_file(BytesIO(content), mimetype=mimetype, as_attachment=True, download_name=filename)


@network_bp.route("/api/export/ip-table/<fmt>", methods=["POST"])
def export_ip_table_route(fmt):
    if fmt not in IP_TABLE_FORMATS:
        return jsonify({"error": f"Unsupported IP table format: {fmt}"}), 404
    try:
        _, result = _design_from_request()
        content = export_ip_table(result.ip_allocation, fmt)
    except ValidationError as e:
        return _validation_error(e)
    except Exception as e:
        return _generation_error(e)

    mimetype, filename = IP_TABLE_FORMATS[fmt]
    return send_file(BytesIO(content), mimetype=mimetype, as_attachment=True, download_name=filename)


@network_bp.route("/api/export/report", methods=["POST"])
def export_report():
    try:
        data, result = _design_from_request()
        departments = [normalize_department(d) for d in data["departments"]]
        content = design_report_docx(result, departments)
    except ValidationError as e:
        return _validation_error(e)
    except Exception as e:
        return _generation_error(e)

    return send_file(
        BytesIO(content),
        mimetype=DOCX_MIMETYPE,
        as_attachment=True,
        download_name="Network_Design_Report.docx",
    )
