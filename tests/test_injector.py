"""Tests for spacsp.injector."""

from __future__ import annotations

import base64
import re
from pathlib import Path

import pytest

from spacsp.injector import (
    CSPInjector,
    InjectionError,
    build_csp,
    build_meta_tag,
    generate_nonce,
    rewrite_html,
)
from spacsp.models import CSPConfig
from tests._fixtures.project_builder import BASIC_HTML, ProjectBuilder

EXISTING_CSP_HTML = """\
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta http-equiv="Content-Security-Policy" content="default-src 'none'">
  <title>App</title>
</head>
<body></body>
</html>
"""


def _csp_tags(html: str) -> list[str]:
    return re.findall(r"<meta[^>]*Content-Security-Policy[^>]*>", html, re.IGNORECASE)


def test_build_csp_resolves_placeholders_in_order() -> None:
    config = CSPConfig(
        directives={
            "default-src": ["'self'"],
            "connect-src": ["'self'", "{{REACT_APP_API_URL}}"],
        }
    )

    csp = build_csp(config, {"REACT_APP_API_URL": "https://api.example.com"})

    assert csp == "default-src 'self'; connect-src 'self' https://api.example.com"
    assert "{{REACT_APP_API_URL}}" not in csp


def test_build_csp_drops_blank_values_and_keeps_bare_directives() -> None:
    config = CSPConfig(
        directives={
            "script-src": ["'self'", "   ", ""],
            "upgrade-insecure-requests": [],
        }
    )

    assert build_csp(config, {}) == "script-src 'self'; upgrade-insecure-requests"


def test_build_csp_substitutes_nonce_tokens() -> None:
    config = CSPConfig(
        directives={
            "script-src": ["'self'", "'nonce-{{nonce}}'"],
            "style-src": ["'nonce-{{CSP_NONCE}}'"],
        }
    )

    csp = build_csp(config, {}, nonce="abc123")

    assert csp == "script-src 'self' 'nonce-abc123'; style-src 'nonce-abc123'"


def test_build_csp_without_nonce_keeps_placeholder() -> None:
    config = CSPConfig(directives={"script-src": ["'nonce-{{nonce}}'"]})

    assert build_csp(config, {}) == "script-src 'nonce-{{nonce}}'"


def test_generate_nonce_is_base64_of_requested_length() -> None:
    nonce = generate_nonce(24)

    assert len(base64.b64decode(nonce)) == 24
    assert generate_nonce(24) != nonce


def test_rewrite_html_replaces_existing_tag() -> None:
    html, replaced = rewrite_html(EXISTING_CSP_HTML, "default-src 'self'")

    assert replaced == 1
    assert _csp_tags(html) == ['<meta http-equiv="Content-Security-Policy" content="default-src \'self\'">']
    assert "default-src 'none'" not in html
    assert html.index("<head>") < html.index("Content-Security-Policy") < html.index("<title>")


def test_rewrite_html_removes_every_existing_variant() -> None:
    source = (
        "<html><head>\n"
        "<meta http-equiv='Content-Security-Policy-Report-Only' content=\"a\">\n"
        '<META content="b" HTTP-EQUIV="content-security-policy">\n'
        "</head></html>"
    )

    html, replaced = rewrite_html(source, "default-src 'self'", report_only=True)

    assert replaced == 2
    assert len(_csp_tags(html)) == 1
    assert 'http-equiv="Content-Security-Policy-Report-Only"' in html


def test_rewrite_html_removes_blank_lines_around_old_tag() -> None:
    source = (
        "<head>\n"
        "\n"
        '  <meta http-equiv="Content-Security-Policy" content="default-src \'none\'">\n'
        "\n"
        "<title>x</title>\n"
        "</head>"
    )

    html, replaced = rewrite_html(source, "default-src 'self'")

    assert replaced == 1
    assert html == (
        "<head>\n"
        '<meta http-equiv="Content-Security-Policy" content="default-src \'self\'">\n'
        "<title>x</title>\n"
        "</head>"
    )


def test_rewrite_html_inserts_after_head_with_attributes() -> None:
    source = '<html><header></header><head lang="en"><title>x</title></head></html>'

    html, replaced = rewrite_html(source, "default-src 'self'")

    assert replaced == 0
    assert '<head lang="en">\n<meta http-equiv=' in html
    assert html.startswith("<html><header></header>")


def test_rewrite_html_prepends_without_head() -> None:
    html, replaced = rewrite_html("<p>fragment</p>", "default-src 'self'")

    assert replaced == 0
    assert html.startswith('<meta http-equiv="Content-Security-Policy"')
    assert html.endswith("\n<p>fragment</p>")


def test_meta_tag_escapes_content() -> None:
    tag = build_meta_tag('script-src "x" https://a.dev?x=1&y=2')

    assert tag == (
        '<meta http-equiv="Content-Security-Policy" '
        'content="script-src &quot;x&quot; https://a.dev?x=1&amp;y=2">'
    )


def test_inject_csp_writes_single_tag(project: ProjectBuilder) -> None:
    path = project.html("index.html", EXISTING_CSP_HTML)
    injector = CSPInjector(
        CSPConfig(directives={"connect-src": ["'self'", "{{VITE_API_URL}}"]}),
        {"VITE_API_URL": "https://api.vite.dev"},
    )

    result = injector.inject_csp(path)

    written = path.read_text(encoding="utf-8")
    assert result.replaced_tags == 1
    assert result.nonce is None
    assert result.csp_string == "connect-src 'self' https://api.vite.dev"
    assert len(_csp_tags(written)) == 1
    assert result.env_vars == {"VITE_API_URL": "https://api.vite.dev"}


def test_inject_csp_without_existing_tag(project: ProjectBuilder) -> None:
    path = project.html("index.html")

    result = CSPInjector({"directives": {"default-src": ["'self'"]}}).inject_csp(path)

    assert result.replaced_tags == 0
    assert len(_csp_tags(path.read_text(encoding="utf-8"))) == 1


def test_inject_csp_generates_distinct_nonces(project: ProjectBuilder) -> None:
    first = project.html("a/index.html")
    second = project.html("b/index.html")
    injector = CSPInjector(
        CSPConfig(directives={"script-src": ["'self'", "'nonce-{{nonce}}'"]}, use_nonce=True)
    )

    one = injector.inject_csp(first)
    two = injector.inject_csp(second)

    assert one.nonce and two.nonce and one.nonce != two.nonce
    assert f"'nonce-{one.nonce}'" in one.csp_string
    assert "{{nonce}}" not in one.csp_string
    assert f"'nonce-{two.nonce}'" in second.read_text(encoding="utf-8")


def test_inject_csp_uses_explicit_string(project: ProjectBuilder) -> None:
    path = project.html("index.html")

    result = CSPInjector(CSPConfig(use_nonce=True)).inject_csp(path, "default-src 'none'")

    assert result.csp_string == "default-src 'none'"
    assert result.nonce is None
    assert 'content="default-src \'none\'"' in path.read_text(encoding="utf-8")


def test_inject_csp_preserves_crlf_line_endings(project: ProjectBuilder) -> None:
    path = project.root / "index.html"
    path.write_bytes(BASIC_HTML.replace("\n", "\r\n").encode("utf-8"))

    CSPInjector(CSPConfig(directives={"default-src": ["'self'"]})).inject_csp(path)

    assert b"<title>App</title>\r\n" in path.read_bytes()


def test_inject_csp_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(InjectionError, match="^Failed to inject CSP:"):
        CSPInjector().inject_csp(tmp_path / "missing.html")
