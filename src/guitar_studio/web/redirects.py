from __future__ import annotations

from flask import Flask, redirect, request


def install_canonical_redirect(app: Flask, *, bare_host: str, canonical_base: str) -> None:
    """Answer requests for the bare domain with a permanent redirect to the www host."""

    bare_host = bare_host.lower()
    canonical_base = canonical_base.rstrip("/")

    @app.before_request
    def redirect_bare_host():
        host = (request.host or "").split(":")[0].lower()
        if host != bare_host:
            return None
        target = f"{canonical_base}{request.path}"
        if request.query_string:
            target = f"{target}?{request.query_string.decode('utf-8')}"
        return redirect(target, code=301)
