import logging
from datetime import datetime, timedelta

from dotenv import load_dotenv
from flask import Flask, g, render_template, request, session, url_for

from app.ideaboard.config import load_config
from app.ideaboard.db import init_db, teardown_db_session
from app.ideaboard.auth import bp as auth_bp, load_current_user
from app.ideaboard.errors import AuthorizationError, NotFoundError
from app.ideaboard.routes import bp as routes_bp
from app.ideaboard.modules.ideas.routes import bp as ideas_bp
from app.ideaboard.modules.comments.routes import bp as comments_bp
from app.ideaboard.modules.votes.routes import bp as votes_bp
from app.ideaboard.modules.notifications.service import init_notifications
from app.ideaboard.navigation import navigation_from_session, record_navigation, request_url, should_record


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=14)
    app.config["SESSION_REFRESH_EACH_REQUEST"] = True

    from app.ideaboard.security import ensure_csrf_token, validate_csrf

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.context_processor
    def _inject_policy() -> dict:
        from app.ideaboard.policy import authorize

        def can(action: str, target=None) -> bool:
            return authorize(getattr(g, "current_user", None), action, target)

        return {"can": can, "current_user": getattr(g, "current_user", None)}

    @app.template_filter("timeago")
    def _timeago_filter(value) -> str:
        if value is None:
            return ""
        seconds = int((datetime.utcnow() - value).total_seconds())
        for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
            if seconds >= size:
                n = seconds // size
                return f"{n} {unit}{'s' if n != 1 else ''} ago"
        return "just now"

    @app.template_global()
    def filter_url(**overrides) -> str:
        """List URL keeping the active filters; changing a filter resets the page."""
        args = {k: v for k, v in request.args.items() if k != "page"}
        args.update({k: v for k, v in overrides.items() if v is not None})
        return url_for("ideas.index", **args)

    @app.template_global()
    def page_url(page: int) -> str:
        args = dict(request.args)
        args["page"] = page
        return url_for(request.endpoint, **(request.view_args or {}), **args)

    @app.before_request
    def _csrf_guard():
        if request.path.startswith(("/static/", "/health", "/healthz")):
            return None
        ensure_csrf_token()
        session.permanent = True
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            if not validate_csrf(request):
                return render_template("errors/400.html", message="CSRF token missing or invalid."), 400

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")
        if app.config.get("MAIL_BACKEND") == "memory":
            raise RuntimeError("MAIL_BACKEND=memory is for tests only.")

    init_db(app)
    init_notifications(app)

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(ideas_bp)
    app.register_blueprint(comments_bp)
    app.register_blueprint(votes_bp)

    def _load_user_wrapper():
        if request.path.startswith(("/static/", "/health", "/healthz")):
            g.current_user = None
            return None
        return load_current_user()

    app.before_request(_load_user_wrapper)

    @app.before_request
    def _load_navigation():
        g.navigation = navigation_from_session(session, request.path)

    @app.after_request
    def _track_navigation(response):
        if should_record(request, response):
            record_navigation(session, request_url(request))
        return response

    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(AuthorizationError)
    def _err_authorization(e: AuthorizationError):  # type: ignore[no-redef]
        user = getattr(g, "current_user", None)
        app.logger.warning(
            "Forbidden: action=%s user_id=%s request_id=%s",
            e.action,
            user.id if user else None,
            getattr(g, "request_id", None),
        )
        return render_template("errors/403.html", action=e.action), 403

    @app.errorhandler(NotFoundError)
    def _err_not_found(e: NotFoundError):  # type: ignore[no-redef]
        return render_template("errors/404.html"), 404

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html"), 404

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return render_template("errors/500.html"), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
