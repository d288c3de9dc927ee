# routes/site.py
from flask import Blueprint, current_app, render_template_string, request

from core.site_resolver import BootStatus, RenderConfig, SiteBootstrapper
from services.website_api import PublicSiteClient

site_bp = Blueprint('site', __name__)

RUNTIME_SCRIPTS = (
    '/js/siteBuilding/runtime-renderer.js',
    '/js/siteBuilding/site-header.js',
    '/js/siteBuilding/site.js',
)

SITE_SHELL_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Tart</title>
</head>
<body>
  <div id="site-header"></div>
  <div id="site-root" data-site="{{ config.site_id }}" data-page="{{ config.page or '' }}"></div>
  <script>window.SITE_BOOTSTRAP_MANUAL = true; window.SITE_CONFIG = {{ site_config|tojson }};</script>
  {% for src in scripts %}<script src="{{ src }}"></script>
  {% endfor %}<script>window.SiteBootstrap && window.SiteBootstrap.run();</script>
</body>
</html>
"""

MESSAGE_TEMPLATE = """<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>Tart</title></head>
<body>
  <div id="site-root"><div class="site-message" style="padding:16px; color:#b00;">{{ message }}</div></div>
</body>
</html>
"""

STATUS_CODES = {
    BootStatus.BOOTED: 200,
    BootStatus.MISSING_SLUG: 200,
    BootStatus.NOT_FOUND: 404,
    BootStatus.ERROR: 500,
}


def render_site_shell(config: RenderConfig) -> str:
    """Boot entry point: page shell that starts the runtime renderer with ``config``"""
    return render_template_string(
        SITE_SHELL_TEMPLATE,
        config=config,
        site_config=config.to_dict(),
        scripts=RUNTIME_SCRIPTS,
    )


def init_site_viewer(app, bootstrapper: SiteBootstrapper = None) -> None:
    """Register the site viewer and its bootstrapper on ``app``"""
    if bootstrapper is None:
        bootstrapper = SiteBootstrapper(
            lookup=PublicSiteClient(app.config.get('API_BASE_URL', '')),
            boot=render_site_shell,
        )
    app.extensions['site_bootstrapper'] = bootstrapper
    app.register_blueprint(site_bp)
    app.logger.info("Site viewer registered")


def _serve():
    bootstrapper = current_app.extensions['site_bootstrapper']
    outcome = bootstrapper.run(request.path, request.args)
    status = STATUS_CODES.get(outcome.status, 500)

    if outcome.status is BootStatus.BOOTED:
        return outcome.output, status

    return render_template_string(MESSAGE_TEMPLATE, message=outcome.message), status


@site_bp.route('/')
def index():
    return _serve()


@site_bp.route('/s/<slug>')
@site_bp.route('/s/<slug>/')
def site_by_slug(slug):
    return _serve()


@site_bp.route('/<segment>')
def site_by_root_segment(segment):
    return _serve()
