import os
import signal
import subprocess

from fzkit.util.process import (
    exec_command,
    exec_command_with,
    is_windows,
    kill_command,
    set_stdin,
)


def test_exec_command_uses_shell_env(monkeypatch):
    monkeypatch.setenv("SHELL", "sh")
    proc = exec_command("echo hello", False, stdout=subprocess.PIPE)
    out, _ = proc.communicate(timeout=10)
    assert out == b"hello\n"
    assert proc.returncode == 0


def test_exec_command_falls_back_to_sh(monkeypatch):
    monkeypatch.setenv("SHELL", "")
    proc = exec_command("echo $0", False, stdout=subprocess.PIPE)
    out, _ = proc.communicate(timeout=10)
    assert out.strip() == b"sh"


def test_exec_command_with_passes_options(tmp_path):
    proc = exec_command_with("sh", "pwd", False, stdout=subprocess.PIPE, cwd=tmp_path)
    out, _ = proc.communicate(timeout=10)
    assert os.path.realpath(out.decode().strip()) == os.path.realpath(tmp_path)


def test_setpgid_creates_process_group():
    proc = exec_command_with("sh", "sleep 30", True)
    try:
        assert os.getpgid(proc.pid) == proc.pid
    finally:
        kill_command(proc)
        proc.wait(timeout=10)


def test_without_setpgid_shares_group():
    proc = exec_command_with("sh", "sleep 30", False)
    try:
        assert os.getpgid(proc.pid) == os.getpgrp()
    finally:
        proc.kill()
        proc.wait(timeout=10)


def test_kill_command_sends_sigkill():
    proc = exec_command_with("sh", "sleep 30", True)
    kill_command(proc)
    assert proc.wait(timeout=10) == -signal.SIGKILL


def test_is_windows_on_posix():
    assert is_windows() is False


def test_set_stdin_redirects_fd0(tmp_path):
    path = tmp_path / "in.txt"
    path.write_bytes(b"payload")
    saved = os.dup(0)
    try:
        with path.open("rb") as handle:
            result = set_stdin(handle)
            assert os.path.samestat(os.fstat(0), os.fstat(handle.fileno()))
        assert result is None
        assert os.read(0, 7) == b"payload"
    finally:
        os.dup2(saved, 0)
        os.close(saved)