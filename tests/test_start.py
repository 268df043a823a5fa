import pytest

from scripts import start


@pytest.fixture()
def execvp(monkeypatch):
    calls = []
    monkeypatch.setattr(start.os, "execvp", lambda file, argv: calls.append((file, argv)))
    for k in ("PORT", "WEB_CONCURRENCY", "WEB_THREADS"):
        monkeypatch.delenv(k, raising=False)
    return calls


def test_port_comes_from_settings(monkeypatch, execvp):
    monkeypatch.setenv("PORT", " 9090 ")
    start.main()
    [(file, argv)] = execvp
    assert file == "gunicorn"
    assert argv[argv.index("--bind") + 1] == "0.0.0.0:9090"
    assert argv[argv.index("--graceful-timeout") + 1] == "10"
    assert argv[argv.index("--workers") + 1] == "1"


def test_default_port(execvp):
    start.main()
    [(_, argv)] = execvp
    assert argv[argv.index("--bind") + 1] == "0.0.0.0:8080"


@pytest.mark.parametrize("raw", ["eighty", "0", "70000"])
def test_invalid_port_exits(monkeypatch, execvp, raw):
    monkeypatch.setenv("PORT", raw)
    with pytest.raises(SystemExit) as exc:
        start.main()
    assert exc.value.code == 1
    assert execvp == []
