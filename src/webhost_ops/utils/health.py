#!/usr/bin/env python3
"""Site health check

Fetches the stack's public URL to confirm the boot script finished and the
web server is serving the template.
"""

import requests
from typing import Any, Dict
from .logger import setup_logger

logger = setup_logger(__name__, "health.log")


def check_website(url: str, timeout: float = 5.0) -> Dict[str, Any]:
    """
    GET the URL and report the outcome. Network failures are reported, not raised.
    """
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        logger.warning(f"Health check of {url} failed: {e}")
        return {"url": url, "ok": False, "status_code": None, "error": str(e)}

    logger.info(f"Health check of {url}: HTTP {resp.status_code}")
    return {
        "url": url,
        "ok": resp.ok,
        "status_code": resp.status_code,
        "error": None if resp.ok else resp.reason,
    }
