import threading
import time
import requests
import pytest
from tests.virtual_letterboxd import app as letterboxd_mock_app

@pytest.fixture(scope="session")
def virtual_letterboxd():
    """Fixture to run a virtual Letterboxd site in a background thread."""
    server_thread = threading.Thread(target=lambda: letterboxd_mock_app.run(port=8097, debug=False, use_reloader=False))
    server_thread.daemon = True
    server_thread.start()

    # Wait for server to be ready
    base_url = "http://localhost:8097"
    timeout = 5
    start_time = time.time()
    while time.time() - start_time < timeout:
        try:
            requests.get(f"{base_url}/alice/watchlist/page/1/")
            break
        except requests.exceptions.ConnectionError:
            time.sleep(0.1)
    else:
        pytest.fail("Virtual Letterboxd server failed to start")

    return base_url

from app import app as flask_app

@pytest.fixture
def app():
    from copy import deepcopy
    old_config = deepcopy(flask_app.config)
    flask_app.config.update({
        "TESTING": True,
    })

    with flask_app.app_context():
        yield flask_app

    flask_app.config = old_config

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture(autouse=True)
def temp_config(tmp_path):
    """Fixture to provide a temporary configuration file."""
    test_config_dir = tmp_path / "config"
    test_config_dir.mkdir()
    test_config_file = test_config_dir / "config.json"

    # Mock CONFIG_FILE in config module
    import config
    original_config_file = config.CONFIG_FILE
    original_config_dir = config.CONFIG_DIR

    config.CONFIG_FILE = str(test_config_file)
    config.CONFIG_DIR = str(test_config_dir)

    yield test_config_file

    # Restore original paths
    config.CONFIG_FILE = original_config_file
    config.CONFIG_DIR = original_config_dir

def make_page_html(*tiles):
    """Build watchlist HTML from ``(attribute, title)`` tuples."""
    body = "".join(
        f'<div class="react-component" data-component-class="LazyPoster" {attr}="{title}"></div>'
        if attr else
        '<div class="react-component" data-component-class="LazyPoster"></div>'
        for attr, title in tiles
    )
    return f"<html><body><ul class=\"grid\">{body}</ul></body></html>"

@pytest.fixture
def page_html():
    return make_page_html
