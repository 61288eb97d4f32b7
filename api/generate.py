"""
api/generate.py

Vercel-compatible Flask serverless function exposing POST /api/generate.

Features:
- Accepts { "prompt": "..." }.
- Forwards the prompt to the configured text-generation API with a fixed
  instruction asking for JSON with html, css and js keys.
- Pulls the generated text out of the reply and parses it as JSON, recovering
  an embedded {...} block when the model adds commentary.
- Returns HTTP 200 with JSON { "html": "...", "css": "...", "js": "..." }.
- On error returns a JSON error and appropriate status code.

Environment variables (required):
- GEMINI_API_KEY : bearer token for the upstream API
  (GOOGLE_GENERATIVE_AI_API_KEY is accepted as an alternative)
Optional:
- GEMINI_MODEL : model identifier (default gemini-2.5-flash)
- GEMINI_ENDPOINT : full endpoint URL, overrides the model-based default
- UPSTREAM_TIMEOUT : request timeout in seconds
Deploy notes:
- Place this file in `api/generate.py` on Vercel.
- Add relevant env vars in Vercel dashboard.
"""

import os
import traceback

from flask import Flask, request, jsonify

from api.utils.config import load_config
from api.utils.extraction import ModelOutputError
from api.utils.generator import generate_app_code
from api.utils.upstream import UpstreamError

app = Flask(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def read_prompt():
    """Return the prompt string from the JSON body, or None if absent/invalid."""
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return None
    prompt = data.get("prompt")
    if not prompt or not isinstance(prompt, str):
        return None
    return prompt


@app.route("/api/generate", methods=ALL_METHODS, provide_automatic_options=False)
def generate_endpoint():
    if request.method != "POST":
        resp = jsonify({"error": "Method not allowed"})
        resp.headers["Allow"] = "POST"
        return resp, 405

    try:
        prompt = read_prompt()
        if prompt is None:
            return (
                jsonify({"error": "Missing or invalid 'prompt' in request body"}),
                400,
            )

        config = load_config()
        if not config.api_key:
            return (
                jsonify(
                    {"error": "Server missing GEMINI_API_KEY environment variable"}
                ),
                500,
            )

        bundle = generate_app_code(prompt, config)
        return jsonify(bundle.to_dict()), 200

    except UpstreamError as e:
        app.logger.error(f"Upstream API error: {e.status_code} {e.body}")
        return jsonify({"error": "Upstream API error", "details": e.body}), 502
    except ModelOutputError as e:
        app.logger.error(f"{e.message}: {e.raw}")
        return jsonify({"error": e.message, "raw": e.raw}), 500
    except Exception as e:
        app.logger.error(f"Server error in /api/generate: {e}")
        traceback.print_exc()
        return jsonify({"error": "Internal server error", "details": str(e)}), 500


if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
