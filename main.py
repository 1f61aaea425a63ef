import argparse
import logging
import os
import secrets
from urllib.parse import urlencode

import uvicorn
from fastapi import FastAPI, Form, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from config import settings
from models import RenderContentRequest, RenderContentResponse
from plugin import SafeIframePlugin
from sanitizer import ContentSanitizer
from shortcodes import ShortcodeRegistry
from store import JsonOptionStore, OptionStore

# Setup Logging
LOG_LEVEL = logging.INFO
if os.getenv("DEBUG", "").lower() in ("true", "1", "yes"):
    LOG_LEVEL = logging.DEBUG

logging.basicConfig(
    level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

TEMPLATES_DIR = settings.TEMPLATES_DIR
if not os.path.isabs(TEMPLATES_DIR):
    TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), TEMPLATES_DIR)

templates = Jinja2Templates(directory=TEMPLATES_DIR)

SHORTCODE_EXAMPLE = (
    f'[{settings.SHORTCODE_TAG} src="https://example.com" width="100%" '
    f'height="500" title="Example iframe"]'
)


def require_admin(token: str):
    """Raises 403 unless the token matches the configured admin token."""
    if not settings.ADMIN_TOKEN:
        logger.warning("Rejected admin request: ADMIN_TOKEN is not configured.")
        raise HTTPException(status_code=403, detail="Admin access is not configured.")
    if not secrets.compare_digest(token or "", settings.ADMIN_TOKEN):
        logger.warning("Rejected admin request with invalid token.")
        raise HTTPException(status_code=403, detail="Not allowed to manage options.")


def create_app(store: OptionStore) -> FastAPI:
    app = FastAPI(title="Safe iFrame Handler")

    shortcodes = ShortcodeRegistry()
    sanitizer = ContentSanitizer()
    plugin = SafeIframePlugin(store, settings.ALLOWED_DOMAINS_OPTION, settings.SHORTCODE_TAG)
    plugin.register(shortcodes, sanitizer)

    app.state.plugin = plugin
    app.state.shortcodes = shortcodes
    app.state.sanitizer = sanitizer

    @app.get(f"/shortcode/{settings.SHORTCODE_TAG}", response_class=HTMLResponse)
    def render_shortcode(request: Request):
        # Query parameters are the shortcode attribute bag
        atts = {k.lower(): v for k, v in request.query_params.items()}
        return HTMLResponse(plugin.iframe_shortcode(atts, None, settings.SHORTCODE_TAG))

    @app.post("/content/render", response_model=RenderContentResponse)
    def render_content(body: RenderContentRequest):
        expanded = shortcodes.do_shortcode(body.content)
        return RenderContentResponse(html=sanitizer.sanitize(expanded, "post"))

    @app.get("/admin/settings", response_class=HTMLResponse)
    def settings_page(
        request: Request, token: str = Query(""), updated: bool = Query(False)
    ):
        require_admin(token)
        return templates.TemplateResponse(
            request,
            "settings.html",
            {
                "page_title": "Safe iFrame Settings",
                "domains": plugin.allowed_domains_text(),
                "token": token,
                "updated": updated,
                "shortcode_example": SHORTCODE_EXAMPLE,
            },
        )

    @app.post("/admin/settings")
    def save_settings(
        allowed_domains: str = Form(""), token: str = Form("")
    ):
        require_admin(token)
        try:
            plugin.update_allowed_domains(allowed_domains)
        except OSError as e:
            logger.error(f"Error saving allowed domains: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Could not save settings.")

        params = {"updated": "true"}
        if token:
            params["token"] = token
        return RedirectResponse(
            url=f"/admin/settings?{urlencode(params)}", status_code=303
        )

    return app


app = create_app(JsonOptionStore(settings.OPTIONS_FILE))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the Safe iFrame Handler service")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.info("Debug logging enabled via command line argument.")

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
