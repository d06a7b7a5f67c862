# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the htmlterm test suite.
# =============================================================================

import pytest
import tempfile
from pathlib import Path

from htmlterm.core import annotations as ann
from htmlterm.rendering.engine import parse_only
from htmlterm.rendering.styles import MappedStyler, plain_mapping


def _identity(text: str) -> str:
    return text


def tag_mapping(annotation):
    """Wrap each annotated span in <kind>...</kind> markers."""
    names = {
        ann.Link: "link",
        ann.Emphasis: "em",
        ann.Strong: "strong",
        ann.Strikeout: "s",
        ann.Code: "code",
        ann.Preformat: "pre",
        ann.Image: "img",
        ann.Colored: "colour",
    }
    name = names.get(type(annotation))
    if name is None:
        return "", _identity, ""
    return f"<{name}>", _identity, f"</{name}>"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def plain_styler():
    """A styler that returns span text unchanged."""
    return MappedStyler(plain_mapping)


@pytest.fixture
def tag_styler():
    """A styler that wraps spans in readable <kind> markers."""
    return MappedStyler(tag_mapping)


@pytest.fixture
def sample_html():
    """Sample document exercising most of the supported markup."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Ignored</title>
        <style>p { color: red; }</style>
    </head>
    <body>
        <h1>Release notes</h1>
        <p>Hello <strong>User</strong>, see <a href="https://example.com/">the site</a>.</p>
        <ul>
            <li>First</li>
            <li>Second</li>
        </ul>
        <blockquote>Quoted text</blockquote>
        <pre>line one
  line two</pre>
        <table>
            <tr><td>a</td><td>b</td></tr>
        </table>
    </body>
    </html>
    """


@pytest.fixture
def sample_tree(sample_html):
    """The sample document, parsed once."""
    return parse_only(sample_html)
