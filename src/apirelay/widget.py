"""
Presentation widget for UI surfaces.

The widget is an HTML page rendered from templates/widget.html.j2. A host
UI loads it as the MCP resource WIDGET_URI and feeds it the last tool
result through its runtime (window.openai.toolOutput). It renders success
and error envelopes, the get_info summary, and greetings.
"""

from functools import lru_cache

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from apirelay import __version__


WIDGET_URI = "ui://widget/api.html"
WIDGET_MIME_TYPE = "text/html+skybridge"
WIDGET_TEMPLATE = "widget.html.j2"


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(
        loader=PackageLoader("apirelay", "templates"),
        autoescape=select_autoescape(enabled_extensions=("html", "j2")),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def render_widget(
    server_name: str = "api-integration-app",
    *,
    heading: str = "API Response",
    refresh_tool: str = "get_info",
) -> str:
    """
    Render the widget HTML.

    Args:
        server_name: Shown in the page metadata
        heading: Page heading
        refresh_tool: Tool the Refresh button invokes

    Returns:
        The complete HTML document
    """
    template = _environment().get_template(WIDGET_TEMPLATE)
    return template.render(
        title=f"{server_name} widget",
        heading=heading,
        server_name=server_name,
        version=__version__,
        refresh_tool=refresh_tool,
    ).strip()
