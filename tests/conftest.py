"""
Pytest configuration and shared fixtures for the test suite.
"""

import sys
from pathlib import Path

import pytest

# Add the package source to Python path for testing
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


def make_node(tag_name, id=None, class_name=None, attributes=None, text=None, children=None):
    """Build a node mapping in the capture JSON shape."""
    node = {"tagName": tag_name, "attributes": dict(attributes or {}), "children": list(children or [])}
    if id is not None:
        node["id"] = id
        node["attributes"].setdefault("id", id)
    if class_name is not None:
        node["className"] = class_name
        node["attributes"].setdefault("class", class_name)
    if text is not None:
        node["textContent"] = text
    return node


def make_snapshot(root, url="https://example.test/login", timestamp=1700000000000, title=None):
    """Wrap a root node mapping in the snapshot JSON shape."""
    snapshot = {"url": url, "timestamp": timestamp, "rootNode": root}
    if title is not None:
        snapshot["title"] = title
    return snapshot


def login_page(button):
    """A small login page with ``button`` as the form's submit control."""
    return make_node("html", children=[
        make_node("head", children=[make_node("title", text="Login")]),
        make_node("body", children=[
            make_node("form", id="login-form", class_name="form", children=[
                make_node("input", id="username", attributes={"name": "username", "type": "text"}),
                make_node("input", id="password", attributes={"name": "password", "type": "password"}),
                make_node("div", class_name="actions", children=[button]),
            ]),
        ]),
    ])


@pytest.fixture
def baseline_snapshot():
    """Baseline page where the submit button has id ``submit``."""
    return make_snapshot(login_page(
        make_node("button", id="submit", class_name="btn primary", text="Submit")
    ))


@pytest.fixture
def current_snapshot():
    """Current page where the submit button was renamed to ``submit-button``."""
    return make_snapshot(login_page(
        make_node("button", id="submit-button", class_name="btn primary", text="Submit")
    ), timestamp=1700000060000)


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Set up logging for tests."""
    import logging
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
