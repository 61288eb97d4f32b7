"""
api/index.py

Vercel-compatible Flask serverless function serving the preview page.

Routes:
- GET  /             : prompt box, html/css/js editors and three sandboxed previews.
- POST /             : form submit without JavaScript; generates in-process and
                       re-renders the page.

Editor keystrokes re-render the previews in the browser from the same document
shell the server uses, without a request.

Generated code only ever runs inside <iframe sandbox="allow-scripts" srcdoc=...>
frames, never in this page's own script context.
"""

import os
import traceback

from flask import Flask, request, render_template_string

from api.utils.config import load_config
from api.utils.extraction import BUNDLE_KEYS, ModelOutputError
from api.utils.generator import generate_app_code
from api.utils.preview import (
    MSG_DONE,
    MSG_EMPTY_PROMPT,
    MSG_FAILED,
    MSG_GENERATING,
    MSG_NETWORK,
    MSG_UNEXPECTED,
    CSS_PLACEHOLDER,
    JS_PLACEHOLDER,
    SLOT_CSS,
    SLOT_HTML,
    SLOT_JS,
    PreviewState,
    apply_network_error,
    apply_response,
    document_shell,
    edit,
    render_surfaces,
    request_generation,
)
from api.utils.upstream import UpstreamError

app = Flask(__name__)

PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width,initial-scale=1"/>
  <title>Prompt to preview</title>
  <style>
    body{font-family:system-ui,-apple-system,Segoe UI,Roboto,Arial;margin:0;padding:1.5rem;}
    #promptForm{display:flex;gap:.5rem;margin-bottom:.5rem;}
    #promptInput{flex:1;padding:.5rem;}
    #status{min-height:1.2em;margin-bottom:1rem;}
    #status.error{color:crimson;}
    .panes{display:grid;grid-template-columns:repeat(3,1fr);gap:1rem;}
    .pane textarea{width:100%;height:12rem;font-family:monospace;box-sizing:border-box;}
    .pane iframe{width:100%;height:14rem;border:1px solid #ccc;background:#fff;}
  </style>
</head>
<body>
  <form id="promptForm" method="post" action="/">
    <input id="promptInput" name="prompt" value="{{ state.prompt }}" placeholder="Describe the page you want"/>
    <button id="generateBtn" type="submit" {% if state.busy %}disabled{% endif %}>Generate</button>
  </form>
  <div id="status" class="{% if state.status_is_error %}error{% endif %}">{{ state.status }}</div>

  <div class="panes">
    {% for key in keys %}
    <div class="pane">
      <h3>{{ key | upper }}</h3>
      <textarea id="{{ key }}Input" name="{{ key }}" form="promptForm">{{ state[key] }}</textarea>
      <iframe id="{{ key }}Preview" sandbox="allow-scripts" srcdoc="{{ surfaces[key] }}"></iframe>
    </div>
    {% endfor %}
  </div>

  <script>
    (function () {
      const MSG = {{ messages | tojson }};
      const KEYS = {{ keys | tojson }};
      const SHELL = {{ shell | tojson }};
      const SLOTS = {{ slots | tojson }};
      const PLACEHOLDERS = {{ placeholders | tojson }};
      const SHELL_PARTS = SHELL.split(
        new RegExp("(" + [SLOTS.html, SLOTS.css, SLOTS.js].join("|") + ")")
      );
      const form = document.getElementById("promptForm");
      const promptInput = document.getElementById("promptInput");
      const generateBtn = document.getElementById("generateBtn");
      const statusEl = document.getElementById("status");
      const editors = {};
      const previews = {};
      KEYS.forEach(function (k) {
        editors[k] = document.getElementById(k + "Input");
        previews[k] = document.getElementById(k + "Preview");
      });

      function setStatus(message, isError) {
        statusEl.textContent = message;
        statusEl.className = isError ? "error" : "";
      }

      function currentBundle() {
        const bundle = {};
        KEYS.forEach(function (k) { bundle[k] = editors[k].value; });
        return bundle;
      }

      // One pass over the shell so code containing a slot marker stays literal.
      function buildDocument(html, css, js) {
        const values = {};
        values[SLOTS.html] = html || "";
        values[SLOTS.css] = css || "";
        values[SLOTS.js] = js || "";
        return SHELL_PARTS.map(function (part) {
          return Object.prototype.hasOwnProperty.call(values, part) ? values[part] : part;
        }).join("");
      }

      function updatePreviews() {
        const b = currentBundle();
        previews.html.srcdoc = buildDocument(b.html, b.css, "");
        previews.css.srcdoc = buildDocument(PLACEHOLDERS.css, b.css, "");
        previews.js.srcdoc = buildDocument(PLACEHOLDERS.js, "", b.js);
      }

      async function generate(event) {
        event.preventDefault();
        const prompt = promptInput.value.trim();
        if (!prompt) {
          setStatus(MSG.empty_prompt, true);
          return;
        }
        generateBtn.disabled = true;
        setStatus(MSG.generating, false);
        try {
          const resp = await fetch("/api/generate", {
            method: "POST",
            headers: { "Content-Type": "application/json" },
            body: JSON.stringify({ prompt: prompt })
          });
          const data = await resp.json();
          if (!resp.ok) {
            console.error("Backend error:", data);
            setStatus(MSG.failed, true);
            return;
          }
          if (!data || KEYS.every(function (k) { return typeof data[k] === "undefined"; })) {
            console.warn("Unexpected response shape:", data);
            setStatus(MSG.unexpected, true);
            return;
          }
          KEYS.forEach(function (k) { editors[k].value = data[k] ?? ""; });
          updatePreviews();
          setStatus(MSG.done, false);
        } catch (err) {
          console.error("Request failed:", err);
          setStatus(MSG.network, true);
        } finally {
          generateBtn.disabled = false;
        }
      }

      form.addEventListener("submit", generate);
      KEYS.forEach(function (k) { editors[k].addEventListener("input", updatePreviews); });
    })();
  </script>
</body>
</html>"""

MESSAGES = {
    "empty_prompt": MSG_EMPTY_PROMPT,
    "generating": MSG_GENERATING,
    "failed": MSG_FAILED,
    "unexpected": MSG_UNEXPECTED,
    "network": MSG_NETWORK,
    "done": MSG_DONE,
}


def render_page(state: PreviewState, status_code: int = 200):
    page = render_template_string(
        PAGE_TEMPLATE,
        state=state,
        keys=list(BUNDLE_KEYS),
        surfaces=render_surfaces(state),
        messages=MESSAGES,
        shell=document_shell(),
        slots={"html": SLOT_HTML, "css": SLOT_CSS, "js": SLOT_JS},
        placeholders={"css": CSS_PLACEHOLDER, "js": JS_PLACEHOLDER},
    )
    return page, status_code


def run_generation(state: PreviewState) -> PreviewState:
    """Generate in-process and fold the outcome back into the page state."""
    config = load_config()
    if not config.api_key:
        app.logger.error("Server missing GEMINI_API_KEY environment variable")
        return apply_response(state, 500, None)
    try:
        bundle = generate_app_code(state.prompt, config)
    except UpstreamError as e:
        app.logger.error(f"Upstream API error: {e.status_code} {e.body}")
        return apply_response(state, 502, None)
    except ModelOutputError as e:
        app.logger.error(f"{e.message}: {e.raw}")
        return apply_response(state, 500, None)
    except Exception as e:
        app.logger.error(f"Request failed: {e}")
        traceback.print_exc()
        return apply_network_error(state)
    return apply_response(state, 200, bundle.to_dict())


@app.route("/", methods=["GET", "POST"])
def index():
    if request.method == "GET":
        return render_page(PreviewState())

    # Editors keep whatever the user had if generation fails.
    state = PreviewState()
    for key in BUNDLE_KEYS:
        state = edit(state, key, request.form.get(key, ""))
    state, should_send = request_generation(state, request.form.get("prompt", ""))
    if should_send:
        state = run_generation(state)
    return render_page(state)


if __name__ == "__main__":
    # Locally there is no Vercel router, so serve /api/generate from here too.
    from api.generate import ALL_METHODS, generate_endpoint

    app.add_url_rule(
        "/api/generate",
        view_func=generate_endpoint,
        methods=ALL_METHODS,
        provide_automatic_options=False,
    )
    app.run(debug=True, host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
