"""
Floating "contact via WhatsApp" button for the public site.

The button carries no state: clicking it opens a wa.me link with a canned
enquiry in a new browsing context.
"""
import html
import json
import re
from urllib.parse import quote

import config

WHATSAPP_BASE = "https://wa.me/"
# characters encodeURIComponent leaves alone
URI_COMPONENT_SAFE = "-_.!~*'()"


def whatsapp_url(number: str = None, message: str = None) -> str:
    number = re.sub(r"\D", "", number if number is not None else config.WHATSAPP_NUMBER)
    message = message if message is not None else config.WHATSAPP_MESSAGE
    return f"{WHATSAPP_BASE}{number}?text={quote(message, safe=URI_COMPONENT_SAFE)}"


def render_button(number: str = None, message: str = None) -> str:
    url = whatsapp_url(number, message)
    onclick = html.escape(f"window.open({json.dumps(url)}, '_blank')", quote=True)
    return (
        '<button type="button" class="whatsapp-button" aria-label="Contact on WhatsApp" '
        'style="position:fixed;bottom:1.5rem;right:1.5rem;z-index:50;width:3.5rem;height:3.5rem;'
        'border-radius:9999px;border:0;background:#22c35e;color:#fff;cursor:pointer;" '
        f'onclick="{onclick}">'
        '<span aria-hidden="true">&#128172;</span>'
        "</button>"
    )
