"""解析 Web API（基于 Flask）

提供：安装输入解析、清单校验、包源列表。

启动方式: nupack serve --port 8888
"""

from __future__ import annotations

import io
import logging
from typing import Any

from flask import Flask, current_app, request
from werkzeug.exceptions import HTTPException

from nupack.core.exceptions import NupackError
from nupack.core.manifest import Manifest
from nupack.core.models import ResolutionInput
from nupack.services.container import ServiceContainer
from nupack.web.responses import bad_request, error_response, ok

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # 1 MB，清单文档足够

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = MAX_CONTENT_LENGTH


def _container() -> ServiceContainer:
    """当前应用绑定的服务容器，未绑定时按当前配置创建"""
    container = current_app.config.get("CONTAINER")
    if container is None:
        from nupack.core.config import get_config
        container = ServiceContainer(config=get_config())
        current_app.config["CONTAINER"] = container
    return container


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def _request_from_body(body: dict[str, Any]) -> ResolutionInput:
    """从请求体构建 ResolutionInput，参数不合法时抛 ValueError"""
    identifier = str(body.get("id") or "").strip()
    if not identifier:
        raise ValueError("需要提供 id")
    frameworks = body.get("frameworks") or []
    if isinstance(frameworks, str):
        frameworks = [frameworks]
    if not isinstance(frameworks, list):
        raise ValueError("frameworks 必须是字符串列表")
    return ResolutionInput(
        identifier=identifier,
        version=str(body.get("version") or ""),
        source=str(body.get("source") or ""),
        include_prerelease=_bool(body.get("prerelease", False)),
        frameworks=tuple(str(f) for f in frameworks),
    )


# =========================================================================
# 全局 JSON 错误处理
# =========================================================================


@app.errorhandler(NupackError)
def handle_nupack_error(exc: NupackError):
    return error_response(exc)


@app.errorhandler(HTTPException)
def handle_http_exception(exc):
    """将所有 HTTP 异常统一返回 JSON"""
    return {"error": exc.description}, exc.code


@app.errorhandler(Exception)
def handle_generic_exception(exc):  # noqa: ARG001
    """捕获未处理异常，返回 500 JSON"""
    logger.exception("未处理的异常")
    return {"error": "服务器内部错误"}, 500


# =========================================================================
# API
# =========================================================================


@app.route("/api/resolve", methods=["POST"])
def api_resolve():
    """解析安装输入，返回标识列表、实际包源、告警与逐条错误"""
    body = request.get_json(silent=True) or {}
    try:
        req = _request_from_body(body)
    except ValueError as e:
        return bad_request(str(e))
    result = _container().install.prepare(req)
    return ok(result.to_dict())


@app.route("/api/manifest/validate", methods=["POST"])
def api_manifest_validate():
    """校验请求体中的清单 XML"""
    data = request.get_data()
    if not data:
        return bad_request("请求体为空，需要提供清单 XML")
    manifest = Manifest.load(io.BytesIO(data))
    md = manifest.metadata
    return ok({
        "valid": True,
        "id": md.id,
        "version": md.version,
        "dependencies": [
            {"id": d.id, "version": d.version} for d in md.dependencies or []
        ],
    })


@app.route("/api/sources", methods=["GET"])
def api_sources():
    registry = _container().sources
    active = registry.active_source()
    return ok({
        "active": active.name if active else None,
        "sources": [
            {"name": s.name, "url": s.url, "enabled": s.enabled, "http": s.is_http}
            for s in registry.list_sources()
        ],
    })


def run_server(
    container: ServiceContainer | None = None,
    host: str = "127.0.0.1",
    port: int = 8888,
    debug: bool = False,
) -> None:
    if container is not None:
        app.config["CONTAINER"] = container
    logger.info("nupack API 已启动: http://%s:%d", host, port)
    app.run(host=host, port=port, debug=debug)
