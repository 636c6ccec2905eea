"""Web 层统一响应辅助函数"""

from __future__ import annotations

from flask import Response, jsonify

from nupack.core.exceptions import NupackError, ValidationError

# 业务异常 code -> HTTP 状态码
STATUS_BY_CODE = {
    "VALIDATION_ERROR": 400,
    "PARSE_ERROR": 400,
    "INVALID_VERSION": 400,
    "CONFIG_ERROR": 500,
    "VERSION_RESOLUTION_ERROR": 404,
    "NOT_SUPPORTED": 501,
    "SOURCE_UNAVAILABLE": 503,
}


def ok(data: dict, status: int = 200) -> tuple[Response, int] | Response:
    """成功响应"""
    if status == 200:
        return jsonify(data)
    return jsonify(data), status


def bad_request(message: str) -> tuple[Response, int]:
    """请求参数错误"""
    return jsonify(error=message), 400


def error_response(exc: NupackError) -> tuple[Response, int]:
    """业务异常统一转为 JSON，校验错误附带全部违规项"""
    body: dict = {"error": str(exc), "code": exc.code}
    if isinstance(exc, ValidationError):
        body["details"] = exc.details
    return jsonify(body), STATUS_BY_CODE.get(exc.code, 500)
