import json
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from src.relay import SampleCallSource
from utils.azure_auth import IdentityConfigurationError

from apps.callcenter.backend import main as main_module
from apps.callcenter.backend.config import AppConfig


@pytest.fixture
def no_identity(monkeypatch):
    monkeypatch.delenv("IDENTITY_CREDENTIALS_JSON", raising=False)
    monkeypatch.delenv("IDENTITY_CREDENTIALS_FILE", raising=False)


@pytest.fixture
def no_stores(monkeypatch):
    monkeypatch.setattr(main_module, "create_store_client", lambda *args, **kwargs: None)


def test_main_refuses_to_start_without_identity_credential(monkeypatch, no_identity):
    run = MagicMock()
    monkeypatch.setattr(main_module.uvicorn, "run", run)

    with pytest.raises(SystemExit) as exc_info:
        main_module.main()

    assert exc_info.value.code == 1
    run.assert_not_called()


def test_main_refuses_malformed_identity_credential(monkeypatch):
    monkeypatch.setenv("IDENTITY_CREDENTIALS_JSON", json.dumps({"tenant_id": "t"}))
    run = MagicMock()
    monkeypatch.setattr(main_module.uvicorn, "run", run)

    with pytest.raises(SystemExit):
        main_module.main()

    run.assert_not_called()


def test_main_binds_when_credential_present(monkeypatch):
    run = MagicMock()
    monkeypatch.setattr(main_module.uvicorn, "run", run)

    main_module.main()

    run.assert_called_once()
    assert run.call_args.kwargs["port"] == main_module.PORT


def test_lifespan_fails_without_identity_credential(no_identity, no_stores):
    app = main_module.create_app()
    main_module.setup_app_middleware_and_routes(app)

    with pytest.raises(IdentityConfigurationError):
        with TestClient(app):
            pass


def test_lifespan_wires_state_and_shuts_down_relay(no_stores):
    app = main_module.create_app()
    main_module.setup_app_middleware_and_routes(app)

    with TestClient(app) as client:
        health = client.get("/health").json()
        relay = app.state.relay
        assert client.get("/agent/status").json() == {"status": "offline"}

    assert health["identity"] is True
    assert health["stores"] == {"call_directory": False, "log_store": False}
    assert health["relay"]["source"] == "SampleCallSource"
    assert app.state.log_store is None
    assert relay.subscription_count == 0


def test_log_path_disabled_when_store_unconfigured(no_stores):
    app = main_module.create_app()
    main_module.setup_app_middleware_and_routes(app)

    with TestClient(app) as client:
        response = client.post("/api/logs/save", json={"phone": "9876543210", "notes": "x"})

    assert response.status_code == 500


def test_directory_event_source_falls_back_to_sample():
    config = AppConfig()
    config.relay.event_source = "directory"

    source = main_module.build_event_source(config, None)

    assert isinstance(source, SampleCallSource)


def test_directory_event_source_used_when_directory_available():
    config = AppConfig()
    config.relay.event_source = "directory"

    source = main_module.build_event_source(config, MagicMock())

    assert type(source).__name__ == "DirectoryCallSource"
