"""Shared test fixtures for lxcpilot tests."""
import logging
import shutil
from pathlib import Path

import pytest

from lxcpilot.core import logger as logger_module
from lxcpilot.core.config import LxcPilotConfig, set_config
from lxcpilot.core.errors import ExecuteError
from lxcpilot.services.lxc import LxcDriver
from lxcpilot.services.lxc.executor import CommandResult


class FakeExecutor:
    """Records commands instead of running them.

    Responses are keyed by program name (e.g. 'lxc-ls'). A response may be a
    string (stdout), an exception instance (raised), a callable taking the
    command, or a list of those consumed in order (the last one repeats).
    With check=False an ExecuteError response is returned as a failed
    result instead. cp, rm and mkdir act on the real filesystem so tests
    can check it.
    """

    def __init__(self):
        self.calls = []
        self.responses = {}

    def run(self, cmd, privileged=False, check=True, timeout=None):
        cmd = [str(part) for part in cmd]
        self.calls.append((cmd, privileged))

        response = self.responses.get(cmd[0])
        if response is None:
            response = getattr(self, f"_fs_{cmd[0]}", "")
        if isinstance(response, list):
            response = response.pop(0) if len(response) > 1 else response[0]
        if callable(response):
            response = response(cmd)
        if isinstance(response, ExecuteError) and not check:
            return CommandResult(
                command=cmd,
                exit_code=response.exit_code or 1,
                stdout=response.stdout,
                stderr=response.stderr,
            )
        if isinstance(response, BaseException):
            raise response

        return CommandResult(command=cmd, exit_code=0, stdout=response or "", stderr="")

    def commands(self, program=None):
        return [cmd for cmd, _ in self.calls if program is None or cmd[0] == program]

    @staticmethod
    def _fs_cp(cmd):
        shutil.copy(cmd[-2], cmd[-1])
        return ""

    @staticmethod
    def _fs_rm(cmd):
        if "-rf" in cmd:
            shutil.rmtree(cmd[-1], ignore_errors=True)
        else:
            Path(cmd[-1]).unlink(missing_ok=True)
        return ""

    @staticmethod
    def _fs_mkdir(cmd):
        Path(cmd[-1]).mkdir(parents=True, exist_ok=True)
        return ""


@pytest.fixture(autouse=True)
def reset_global_config(monkeypatch):
    """Keep the process-wide config and environment from leaking between tests."""
    for var in ("LXC_START_LOG_FILE", "LXCPILOT_LOG_FILE", "LXCPILOT_CONFIG"):
        monkeypatch.delenv(var, raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def fake_executor():
    return FakeExecutor()


@pytest.fixture
def lxc_root(tmp_path):
    """Containers root with one container 'web' whose config names its rootfs."""
    root = tmp_path / "lxc"
    rootfs = root / "web" / "rootfs"
    rootfs.mkdir(parents=True)
    (root / "web" / "config").write_text(
        "lxc.utsname = web\n"
        f"lxc.rootfs = {rootfs}\n"
        "lxc.network.type = veth\n"
    )
    return root


@pytest.fixture
def templates_dir(tmp_path):
    path = tmp_path / "templates"
    path.mkdir()
    return path


@pytest.fixture
def config(lxc_root, templates_dir):
    """Config pointing at temporary directories, without retry delays."""
    return LxcPilotConfig(
        containers_path=str(lxc_root),
        templates_lookup=[str(templates_dir)],
        ip_retry_delay=0,
        transition_timeout=5,
    )


@pytest.fixture
def running_web(fake_executor):
    """Executor responses for an existing, running container named 'web'."""
    fake_executor.responses["lxc-ls"] = "web  other\n"
    fake_executor.responses["lxc-info"] = "state:   RUNNING\npid:     1234\n"
    return fake_executor


@pytest.fixture
def driver(fake_executor, config):
    """Driver for container 'web' backed by the fake executor."""
    return LxcDriver("web", executor=fake_executor, config=config)


@pytest.fixture
def file_logging(monkeypatch):
    """Start without a log file handler and drop whichever one a test adds."""
    monkeypatch.setattr(logger_module, "_file_handler", None)
    yield
    handler = logger_module._file_handler
    if handler is not None:
        logging.getLogger(logger_module.ROOT_LOGGER).removeHandler(handler)
        handler.close()
