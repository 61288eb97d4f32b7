import pytest

from api.utils.preview import (
    CSS_PLACEHOLDER,
    JS_PLACEHOLDER,
    MSG_DONE,
    MSG_EMPTY_PROMPT,
    MSG_FAILED,
    MSG_GENERATING,
    MSG_NETWORK,
    MSG_UNEXPECTED,
    PreviewState,
    apply_network_error,
    apply_response,
    build_document,
    document_shell,
    edit,
    render_surfaces,
    request_generation,
)


@pytest.fixture
def filled():
    return PreviewState(html="<p>old</p>", css="p{}", js="old()", busy=True)


@pytest.mark.parametrize("prompt", ["", "   ", "\n\t"])
def test_blank_prompt_is_not_sent(prompt):
    state, should_send = request_generation(PreviewState(), prompt)

    assert should_send is False
    assert state.status == MSG_EMPTY_PROMPT
    assert state.status_is_error
    assert not state.busy


def test_prompt_starts_request():
    state, should_send = request_generation(PreviewState(), "  a card \n")

    assert state.prompt == "a card"
    assert should_send is True
    assert state.busy
    assert state.status == MSG_GENERATING
    assert not state.status_is_error


def test_success_with_only_html(filled):
    state = apply_response(filled, 200, {"html": "<h1>new</h1>"})

    assert (state.html, state.css, state.js) == ("<h1>new</h1>", "", "")
    assert state.status == MSG_DONE
    assert not state.busy

    surfaces = render_surfaces(state)
    assert "<h1>new</h1>" in surfaces["html"]
    assert CSS_PLACEHOLDER in surfaces["css"]
    assert JS_PLACEHOLDER in surfaces["js"]


def test_error_status_keeps_editors(filled):
    state = apply_response(filled, 502, {"error": "Upstream API error"})

    assert (state.html, state.css, state.js) == ("<p>old</p>", "p{}", "old()")
    assert state.status == MSG_FAILED
    assert state.status_is_error
    assert not state.busy


@pytest.mark.parametrize("payload", [None, {}, {"message": "ok"}, ["<p>"]])
def test_unexpected_shape_keeps_editors(filled, payload):
    state = apply_response(filled, 200, payload)

    assert state.html == "<p>old</p>"
    assert state.status == MSG_UNEXPECTED
    assert not state.busy


def test_network_error_releases_trigger(filled):
    state = apply_network_error(filled)

    assert state.status == MSG_NETWORK
    assert not state.busy
    assert state.js == "old()"


def test_edit_updates_one_editor(filled):
    state = edit(filled, "css", "p{color:blue}")

    assert state.css == "p{color:blue}"
    assert state.html == filled.html
    assert "p{color:blue}" in render_surfaces(state)["html"]


def test_edit_rejects_unknown_editor(filled):
    with pytest.raises(ValueError):
        edit(filled, "python", "print()")


def test_build_document_layout():
    doc = build_document("<main>x</main>", "main{margin:0}", "boom()")

    assert doc.startswith("<!doctype html>")
    assert '<meta charset="utf-8"/>' in doc
    assert "<style>main{margin:0}</style>" in doc
    assert "<main>x</main>" in doc
    assert "try {" in doc and "boom()" in doc
    assert "catch(e) { console.error(e) }" in doc


def test_surfaces_isolate_fields():
    state = PreviewState(html="<b>H</b>", css="b{}", js="run()")
    surfaces = render_surfaces(state)

    assert "run()" not in surfaces["html"]
    assert "<b>H</b>" not in surfaces["css"]
    assert "run()" not in surfaces["css"]
    assert "<b>H</b>" not in surfaces["js"]
    assert "b{}" not in surfaces["js"]
    assert "run()" in surfaces["js"]


def test_document_shell_has_each_slot_once():
    shell = document_shell()

    for slot in ("@@HTML@@", "@@CSS@@", "@@JS@@"):
        assert shell.count(slot) == 1
    assert shell.index("@@CSS@@") < shell.index("@@HTML@@") < shell.index("@@JS@@")
