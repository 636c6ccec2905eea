"""网络工具 — URL 校验、可达性检查、原始内容下载"""

from __future__ import annotations

import json
import logging
import socket
import urllib.error
import urllib.request
from typing import Any
from urllib.parse import urlparse

from nupack.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = frozenset(("http", "https"))

# 仅用于选路判断，UDP connect 不发送任何数据包
_PROBE_ADDRESS = ("192.0.2.1", 80)

USER_AGENT = "nupack"


class ResourceNotFound(ConnectionError):
    """服务端返回 404"""


def is_http_source(source: str | None) -> bool:
    """source 是否为 http/https 地址"""
    if not source:
        return False
    return urlparse(source.strip()).scheme.lower() in _ALLOWED_SCHEMES


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https，防止 file:// 等非预期协议访问

    Raises:
        ValidationError: URL scheme 不在白名单内
    """
    parsed = urlparse(url)
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES:
        label = f" ({context})" if context else ""
        raise ValidationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，"
            f"仅支持 http/https: {url}"
        )


def is_network_available() -> bool:
    """主机层面是否存在可用的非回环网络

    只判断能否为外部地址选出本地出口，不代表任何具体包源可达。
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(_PROBE_ADDRESS)
        local_ip = sock.getsockname()[0]
    except OSError as e:
        logger.debug("网络不可用: %s", e)
        return False
    finally:
        sock.close()
    return not local_ip.startswith("127.") and local_ip != "0.0.0.0"  # nosec B104


def fetch_bytes(url: str, *, timeout: int = 30) -> bytes:
    """下载 URL 原始内容

    Raises:
        ValidationError: 非 http/https 地址
        ConnectionError: 请求失败
    """
    validate_url_scheme(url, context="fetch")
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:  # nosec B310
            return resp.read()
    except urllib.error.HTTPError as e:
        if e.code == 404:
            raise ResourceNotFound(f"资源不存在: {url}") from e
        raise ConnectionError(f"下载失败: {url} - {e}") from e
    except (urllib.error.URLError, OSError) as e:
        raise ConnectionError(f"下载失败: {url} - {e}") from e


def fetch_json(url: str, *, timeout: int = 30) -> Any:
    data = fetch_bytes(url, timeout=timeout)
    try:
        return json.loads(data)
    except ValueError as e:
        raise ConnectionError(f"响应不是合法 JSON: {url} - {e}") from e
