import io
import json
import importlib
import logging

import pytest


def reload_module():
    import common_utils.logging_utils as lu
    return importlib.reload(lu)


def test_log_level_from_env(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    lu = reload_module()
    logger = lu.configure_logger("env-test")
    assert logger.level == logging.DEBUG


def test_log_level_from_ssm(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.setattr(
        "common_utils.get_ssm.get_config", lambda name: "warning" if name == "LOG_LEVEL" else None
    )
    lu = reload_module()
    logger = lu.configure_logger("ssm-level")
    assert logger.level == logging.WARNING


def _emit(logger):
    stream = io.StringIO()
    for h in logger.handlers:
        h.stream = stream
    logger.info("hi")
    return stream.getvalue().strip()


def test_json_logging_env(monkeypatch):
    monkeypatch.setenv("LOG_JSON", "true")
    lu = reload_module()
    logger = lu.configure_logger("json-env")
    out = _emit(logger)
    assert json.loads(out)["message"] == "hi"


def test_json_logging_ssm(monkeypatch):
    monkeypatch.delenv("LOG_JSON", raising=False)
    monkeypatch.setattr(
        "common_utils.get_ssm.get_config", lambda name: "true" if name == "LOG_JSON" else None
    )
    lu = reload_module()
    logger = lu.configure_logger("json-ssm")
    out = _emit(logger)
    assert json.loads(out)["message"] == "hi"


def test_json_logging_context_fields(monkeypatch):
    monkeypatch.setenv("LOG_JSON", "true")
    lu = reload_module()
    logger = lu.configure_logger("json-context")
    stream = io.StringIO()
    for h in logger.handlers:
        h.stream = stream
    logger.warning("rule skipped", extra={"rule_id": "r1", "form_id": "f1"})
    payload = json.loads(stream.getvalue().strip())
    assert payload["rule_id"] == "r1"
    assert payload["form_id"] == "f1"
    assert "template_id" not in payload


def test_get_config_without_environment(monkeypatch):
    import common_utils.get_ssm as g

    monkeypatch.delenv("SERVER_ENV", raising=False)
    assert g.get_environment_prefix() is None
    assert g.get_config("LOG_LEVEL") is None


def test_get_config_reads_prefixed_parameter(monkeypatch):
    import common_utils.get_ssm as g

    calls = []

    class FakeSSM:
        def get_parameter(self, Name, WithDecryption):
            calls.append(Name)
            return {"Parameter": {"Value": "q-url"}}

    g.clear_cache()
    monkeypatch.setenv("SERVER_ENV", "dev")
    monkeypatch.setattr(g, "_ssm_client", FakeSSM())
    assert g.get_config("DEST_QUEUE_URL") == "q-url"
    assert g.get_config("DEST_QUEUE_URL") == "q-url"
    assert calls == ["/parameters/forms/dev/DEST_QUEUE_URL"]
    g.clear_cache()
    assert g.get_config("DEST_QUEUE_URL") == "q-url"
    assert len(calls) == 2
    g.clear_cache()
