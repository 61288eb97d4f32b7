import logging

from api.utils.config import UpstreamConfig
from api.utils.extraction import CodeBundle, extract_text, parse_bundle
from api.utils.upstream import call_upstream


logger = logging.getLogger(__name__)


def generate_app_code(prompt: str, config: UpstreamConfig) -> CodeBundle:
    """
    Ask the model for html/css/js for the given prompt.

    Raises UpstreamError on a non-2xx reply and ModelOutputError when the
    reply holds no usable JSON object.
    """
    data = call_upstream(prompt, config)
    strategy, text = extract_text(data)
    logger.debug("Extracted model text via %s (%d chars)", strategy, len(text))
    return parse_bundle(text)
