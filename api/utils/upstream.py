import requests

from api.utils.config import UpstreamConfig


SYSTEM_INSTRUCTION = (
    "Return valid JSON only. The JSON object must have three keys: "
    '"html", "css", "js". Each value should be a string containing the code '
    "for that file. Do not include any extra commentary."
)


class UpstreamError(Exception):
    """Raised when the text-generation API answers with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Upstream returned {status_code}")
        self.status_code = status_code
        self.body = body


def build_request_body(prompt: str) -> dict:
    return {
        "input": [
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {"role": "user", "content": prompt},
        ]
    }


def call_upstream(prompt: str, config: UpstreamConfig):
    """
    POST the prompt to the configured endpoint and return the decoded reply.

    A 2xx reply that is not JSON comes back as its raw text.
    """
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {config.api_key}",
    }
    r = requests.post(
        config.endpoint,
        headers=headers,
        json=build_request_body(prompt),
        timeout=config.timeout,
    )
    if not 200 <= r.status_code < 300:
        raise UpstreamError(r.status_code, r.text)

    try:
        return r.json()
    except ValueError:
        return r.text
