import pytest

import loadtest


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Empty project directory used as the working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MODLOAD_PATH", raising=False)
    monkeypatch.delenv("MODLOAD_DEBUG", raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)
    return tmp_path


@pytest.fixture
def loader(project):
    """Loader for the project directory with an empty search path."""
    return loadtest.make_loader(project)
