"""Generic fallback image: a templated page, or a Pillow placeholder."""

from __future__ import annotations

import html
from io import BytesIO
from string import Template

from PIL import Image, ImageDraw

FALLBACK_TEMPLATE = Template(
    """<!DOCTYPE html>
<html>
<head>
  <title>BubbleMaps Visualization</title>
  <style>
    body {
      font-family: Arial, sans-serif;
      display: flex;
      justify-content: center;
      align-items: center;
      height: 100vh;
      margin: 0;
      background-color: #f0f0f0;
    }
    .container {
      text-align: center;
      padding: 20px;
      background-color: white;
      border-radius: 10px;
      box-shadow: 0 0 10px rgba(0,0,0,0.1);
    }
    h1 { color: #333; }
    p { color: #666; }
    .address { font-family: monospace; word-break: break-all; }
  </style>
</head>
<body>
  <div class="container">
    <h1>BubbleMaps Visualization</h1>
    <p>Token: <span class="address">$address</span></p>
    <p>Chain: $chain</p>
    <p>Visit <a href="$map_url">BubbleMaps</a> to see the full visualization.</p>
  </div>
</body>
</html>
"""
)

BACKGROUND = (240, 240, 240)
CARD = (255, 255, 255)
TITLE_COLOR = (51, 51, 51)
TEXT_COLOR = (102, 102, 102)


def render_fallback_html(address: str, chain: str, map_url: str) -> str:
    """Minimal page naming the token and network, for the browser to capture."""
    return FALLBACK_TEMPLATE.substitute(
        address=html.escape(address),
        chain=html.escape(chain.upper()),
        map_url=html.escape(map_url, quote=True),
    )


def render_placeholder_png(address: str, chain: str, width: int, height: int) -> bytes:
    """Draw the fallback card without a browser."""
    image = Image.new("RGB", (width, height), BACKGROUND)
    draw = ImageDraw.Draw(image)

    margin_x, margin_y = width // 10, height // 4
    draw.rectangle(
        [margin_x, margin_y, width - margin_x, height - margin_y],
        fill=CARD,
        outline=(220, 220, 220),
    )

    lines = [
        ("BubbleMaps Visualization", TITLE_COLOR),
        (f"Token: {address}", TEXT_COLOR),
        (f"Chain: {chain.upper()}", TEXT_COLOR),
    ]
    y = margin_y + 30
    for text, color in lines:
        text_width = draw.textlength(text)
        draw.text(((width - text_width) / 2, y), text, fill=color)
        y += 30

    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
