"""Template rendering utilities and the text artifacts dockhand writes."""

import logging
from typing import Any
from jinja2 import Environment, StrictUndefined, TemplateError


logger = logging.getLogger(__name__)


DOCKER_OVERRIDE_TEMPLATE = """\
[Service]
# Reset ExecStart defined by the packaged unit
ExecStart=
# Start dockerd without forcing a default runtime; it will honor {{ daemon_config }}
ExecStart={{ dockerd }} -H fd://{% if containerd_socket %} --containerd={{ containerd_socket }}{% endif %}
"""

DOCKER_SOURCES_TEMPLATE = """\
deb [arch={{ arch }} signed-by={{ keyring }}] {{ repository }} {{ codename }} stable
"""

NIC_LINK_TEMPLATE = """\
[Match]
MACAddress={{ mac }}

[Link]
Name={{ name }}
"""

DEMO_PAGE_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<meta charset="utf-8">
<title>Hello from {{ fqdn }}</title>
<meta name="viewport" content="width=device-width, initial-scale=1">
<style>
  body { font-family: system-ui, -apple-system, Segoe UI, Roboto, sans-serif; margin: 2rem; }
  .card { max-width: 720px; padding: 1.25rem 1.5rem; border: 1px solid #ddd; border-radius: 12px; }
  h1 { margin: 0 0 .5rem 0; font-size: 1.75rem; }
  code { background: #f6f8fa; padding: .125rem .375rem; border-radius: 6px; }
</style>
<body>
  <div class="card">
    <h1>It works!</h1>
    <p>This is the demo site for <strong>{{ fqdn }}</strong> behind <code>nginx-proxy</code> with automatic TLS.</p>
    <ul>
      <li>Backend container: <code>{{ image }}</code></li>
      <li>Health endpoint: <code>https://{{ fqdn }}/health</code></li>
    </ul>
    <p>Edit this page by recreating the demo container with your own content.</p>
  </div>
</body>
</html>
"""

# Runs inside the demo container; the page arrives through DEMO_INDEX_HTML
DEMO_ENTRYPOINT_SCRIPT = (
    'set -e; '
    'printf "%s" "$DEMO_INDEX_HTML" > /usr/share/nginx/html/index.html; '
    'printf "ok" > /usr/share/nginx/html/health; '
    'exec nginx -g "daemon off;"'
)


# Config artifacts are written verbatim; only the demo page is HTML
_TEXT_ENV = Environment(undefined=StrictUndefined, keep_trailing_newline=True, autoescape=False)
_HTML_ENV = Environment(undefined=StrictUndefined, keep_trailing_newline=True, autoescape=True)


def render_template(template_str: str, html: bool = False, **context: Any) -> str:
    """Render a template string; every referenced variable must be supplied."""
    env = _HTML_ENV if html else _TEXT_ENV
    try:
        return env.from_string(template_str).render(**context)
    except TemplateError as e:
        logger.error(f"Could not render template: {e}")
        raise
