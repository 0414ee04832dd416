"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: routes/pages.py – стартовая страница и панель пользователя.
"""

from flask import current_app, jsonify, url_for
from flask_login import current_user, login_required

from utils.errors import UnknownPlanLimitError
from utils.plan_settings import Entitlement


def _plan_limits(user) -> dict:
    """Лимиты тарифа для панели; ненастроенный лимит показывается как null."""
    provisioner = current_app.extensions["provisioner"]
    limits = {}
    for kind in Entitlement:
        try:
            limits[kind.value] = provisioner.check_entitlement(user, kind)
        except UnknownPlanLimitError as error:
            current_app.logger.warning(
                "Лимит не настроен: тариф %s, ресурс %s",
                error.plan,
                error.resource,
            )
            limits[kind.value] = None
    return limits


def register_routes(app):
    @app.get("/")
    @app.get("/pages/index")
    def index():
        payload = {
            "name": "Baseapp",
            "authenticated": current_user.is_authenticated,
            "signup_url": url_for("signup"),
            "login_url": url_for("login"),
        }
        if current_user.is_authenticated:
            payload["dashboard_url"] = url_for("dashboard")
        return jsonify(payload)

    @app.get("/user")
    @app.get("/dashboard")
    @login_required
    def dashboard():
        """Сводка по пользователю: первый вход, проекты, счета, лимиты."""
        user = current_user._get_current_object()
        return jsonify(
            {
                "user": user.to_dict(),
                "full_name": user.full_name,
                "is_admin": user.is_admin,
                "first_login": user.is_first_login,
                "project_count": user.project_count,
                "recent_projects": [project.to_dict() for project in user.recent_projects],
                "invoice_total": user.invoice_total,
                "uploaded_bytes": user.uploaded_bytes,
                "upload_limit_reached": user.upload_limit_reached,
                "plan": user.account.plan,
                "limits": _plan_limits(user),
            }
        )
