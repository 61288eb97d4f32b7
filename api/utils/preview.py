"""
Preview page state and document composition.

The page is described by a PreviewState value; every user action is a pure
function from the current state to the next one. Preview documents are
rebuilt from scratch on each render and are meant for sandboxed iframes only.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Tuple

from api.utils.extraction import BUNDLE_KEYS


MSG_EMPTY_PROMPT = "Please enter a prompt."
MSG_GENERATING = "Generating…"
MSG_FAILED = "Generation failed. See console."
MSG_UNEXPECTED = "Unexpected response from server. See console."
MSG_NETWORK = "Network or server error. See console."
MSG_DONE = "Generated — editors updated."

CSS_PLACEHOLDER = "<div class='rebuild-demo'>CSS preview</div>"
JS_PLACEHOLDER = "<div id='rebuild-js-root'></div>"

# Slot markers let the page script fill the same document in the browser.
SLOT_HTML = "@@HTML@@"
SLOT_CSS = "@@CSS@@"
SLOT_JS = "@@JS@@"

DOCUMENT_TEMPLATE = """<!doctype html>
<html>
  <head>
    <meta charset="utf-8"/>
    <meta name="viewport" content="width=device-width,initial-scale=1"/>
    <style>{css}</style>
  </head>
  <body>
    {html}
    <script>
      try {{
        {js}
      }} catch(e) {{ console.error(e) }}
    </script>
  </body>
</html>"""


@dataclass(frozen=True)
class PreviewState:
    prompt: str = ""
    html: str = ""
    css: str = ""
    js: str = ""
    status: str = ""
    status_is_error: bool = False
    busy: bool = False


def build_document(html: str, css: str, js: str) -> str:
    """Compose a minimal page with css in <style> and js guarded by try/catch."""
    return DOCUMENT_TEMPLATE.format(html=html or "", css=css or "", js=js or "")


def document_shell() -> str:
    """build_document with slot markers in place of the three fields."""
    return build_document(SLOT_HTML, SLOT_CSS, SLOT_JS)


def render_surfaces(state: PreviewState) -> Dict[str, str]:
    """Documents for the html, css and js preview frames."""
    return {
        "html": build_document(state.html, state.css, ""),
        "css": build_document(CSS_PLACEHOLDER, state.css, ""),
        "js": build_document(JS_PLACEHOLDER, "", state.js),
    }


def _status(state: PreviewState, message: str, is_error: bool = False) -> PreviewState:
    return replace(state, status=message, status_is_error=is_error)


def request_generation(state: PreviewState, prompt: str) -> Tuple[PreviewState, bool]:
    """
    Handle a click on the generate button.

    Returns the next state and whether a request should be sent.
    """
    prompt = prompt.strip()
    state = replace(state, prompt=prompt)
    if not prompt:
        return _status(state, MSG_EMPTY_PROMPT, True), False
    return _status(replace(state, busy=True), MSG_GENERATING), True


def is_bundle(payload: Any) -> bool:
    return isinstance(payload, dict) and any(key in payload for key in BUNDLE_KEYS)


def apply_response(state: PreviewState, status_code: int, payload: Any) -> PreviewState:
    state = replace(state, busy=False)
    if not 200 <= status_code < 300:
        return _status(state, MSG_FAILED, True)
    if not is_bundle(payload):
        return _status(state, MSG_UNEXPECTED, True)

    fields = {key: payload.get(key) or "" for key in BUNDLE_KEYS}
    return _status(replace(state, **fields), MSG_DONE)


def apply_network_error(state: PreviewState) -> PreviewState:
    return _status(replace(state, busy=False), MSG_NETWORK, True)


def edit(state: PreviewState, field: str, value: str) -> PreviewState:
    """An editor keystroke; previews follow on the next render."""
    if field not in BUNDLE_KEYS:
        raise ValueError(f"Unknown editor: {field}")
    return replace(state, **{field: value})
