"""Convenience launcher for the explorer development server.

Usage:
    python start_dev.py [ROOT] [--port 3000] [--host 127.0.0.1]

ROOT is the directory to expose (defaults to EXPLORER_ROOT_DIR or the
current directory). The script prefers a virtual environment in
``backend/.venv`` or ``.venv`` and runs Uvicorn with --reload.
Press Ctrl+C to stop.
"""

from __future__ import annotations

import argparse
import os
import signal
import subprocess
import sys
from pathlib import Path

REPO_DIR = Path(__file__).resolve().parent
BACKEND_DIR = REPO_DIR / "backend"

_VENV_PYTHON = ".venv\\Scripts\\python.exe" if os.name == "nt" else ".venv/bin/python"

# ANSI colors (disabled on Windows without VT support)
if os.name == "nt":
    os.system("")  # enable VT100 on Windows 10+

CYAN = "\033[36m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"


def log(level: str, msg: str) -> None:
    colors = {"info": CYAN, "start": GREEN, "stop": YELLOW, "error": RED}
    color = colors.get(level, "")
    print(f"{color}[{level}]{RESET} {msg}")


def resolve_python() -> str:
    """Find the best Python interpreter for the backend."""
    for base in (BACKEND_DIR, REPO_DIR):
        candidate = base / _VENV_PYTHON
        if candidate.exists():
            return str(candidate)
    log("info", "No venv found, using system Python")
    return sys.executable


def check_dependencies(python: str) -> bool:
    """Verify critical packages are importable."""
    result = subprocess.run(
        [python, "-c", "import fastapi, uvicorn, pydantic_settings, psutil"],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        log("error", "Missing dependencies. Run:")
        log("error", f"  cd {REPO_DIR} && pip install -e '.[dev]'")
        return False
    return True


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the explorer with auto-reload")
    parser.add_argument("root", nargs="?", help="directory to expose")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3000)
    return parser.parse_args(argv)


def stop(proc: subprocess.Popen) -> None:
    if proc.poll() is not None:
        return
    log("stop", "backend")
    try:
        if os.name == "nt":
            proc.send_signal(signal.CTRL_BREAK_EVENT)
        else:
            os.killpg(os.getpgid(proc.pid), signal.SIGTERM)
        proc.wait(timeout=10)
    except (subprocess.TimeoutExpired, ProcessLookupError):
        proc.kill()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    python = resolve_python()
    if not check_dependencies(python):
        return 1

    env = dict(os.environ)
    env.setdefault("EXPLORER_DEBUG", "true")
    env.setdefault("EXPLORER_LOG_LEVEL", "INFO")
    # uvicorn runs from backend/, so pin the root before "." changes meaning
    root = str(Path(args.root or env.get("EXPLORER_ROOT_DIR") or os.getcwd()).resolve())
    env["EXPLORER_ROOT_DIR"] = root
    if not Path(root).is_dir():
        log("error", f"Root is not a directory: {root}")
        return 1

    cmd = [
        python, "-m", "uvicorn", "explorer.main:app",
        "--reload", "--host", args.host, "--port", str(args.port),
    ]
    log("info", f"Python: {python}")
    log("info", f"Root:   {root}")
    log("start", " ".join(cmd))

    kwargs: dict = {"cwd": BACKEND_DIR, "env": env}
    if os.name == "nt":
        kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        kwargs["start_new_session"] = True
    proc = subprocess.Popen(cmd, **kwargs)

    log("info", f"  API:  http://{args.host}:{args.port}/api/tree")
    log("info", f"  Docs: http://{args.host}:{args.port}/docs")
    try:
        return proc.wait()
    except KeyboardInterrupt:
        print()
        log("info", "Ctrl+C received, shutting down...")
        return 0
    finally:
        stop(proc)


if __name__ == "__main__":
    raise SystemExit(main())
