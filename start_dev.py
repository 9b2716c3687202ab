"""Convenience launcher for the FileDeck development server.

Usage:
    python start_dev.py                 # in-memory sample device
    python start_dev.py --prod          # talk to the device bridge
    python start_dev.py --port 9000

Press Ctrl+C to stop. Uses the backend virtual environment when one exists
and runs Uvicorn with --reload. Run from the repository root.
"""

from __future__ import annotations

import argparse
import os
import signal
import subprocess
import sys
import time
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
BACKEND_DIR = ROOT_DIR / "backend"

BACKEND_VENV = BACKEND_DIR / (
    ".venv\\Scripts\\python.exe" if os.name == "nt" else ".venv/bin/python"
)

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


def resolve_backend_python() -> str:
    """Prefer the backend venv, fall back to the running interpreter."""
    if BACKEND_VENV.exists():
        return str(BACKEND_VENV)
    log("info", "No venv found, using system Python")
    return sys.executable


def check_dependencies(python: str) -> bool:
    """Verify critical packages are importable."""
    result = subprocess.run(
        [python, "-c", "import fastapi; import uvicorn; import httpx; import pydantic_settings"],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        log("error", "Missing dependencies. Run:")
        log("error", f"  cd {ROOT_DIR} && pip install -e '.[dev]'")
        return False
    return True


def start_backend(cmd: list[str]) -> subprocess.Popen:
    log("start", f"backend: {' '.join(cmd)}")
    if os.name == "nt":
        return subprocess.Popen(
            cmd, cwd=BACKEND_DIR, creationflags=subprocess.CREATE_NEW_PROCESS_GROUP
        )
    return subprocess.Popen(cmd, cwd=BACKEND_DIR, start_new_session=True)


def terminate(proc: subprocess.Popen) -> None:
    if proc.poll() is not None:
        return
    log("stop", "backend")
    try:
        if os.name == "nt":
            proc.send_signal(signal.CTRL_BREAK_EVENT)
        else:
            os.killpg(os.getpgid(proc.pid), signal.SIGTERM)
        proc.wait(timeout=10)
    except ProcessLookupError:
        pass
    except subprocess.TimeoutExpired:
        proc.kill()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the FileDeck dev server")
    parser.add_argument("--prod", action="store_true", help="use the HTTP device bridge")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    python = resolve_backend_python()
    log("info", f"Python: {python}")
    if not check_dependencies(python):
        return 1

    os.environ.setdefault("FILEDECK_DEBUG", "true")
    os.environ.setdefault("FILEDECK_LOG_LEVEL", "INFO")
    os.environ["FILEDECK_MODE"] = "prod" if args.prod else "dev"

    proc = start_backend([
        python, "-m", "uvicorn", "filedeck.main:app",
        "--reload", "--host", "0.0.0.0", "--port", str(args.port),
    ])

    log("info", "")
    log("info", f"  Browser: http://localhost:{args.port}/api/browser")
    log("info", f"  Health:  http://localhost:{args.port}/api/health")
    log("info", f"  Docs:    http://localhost:{args.port}/docs")
    log("info", "")
    log("info", "Press Ctrl+C to stop")

    try:
        while True:
            retcode = proc.poll()
            if retcode is not None:
                log("info", f"backend exited with code {retcode}")
                return retcode or 0
            time.sleep(0.5)
    except KeyboardInterrupt:
        print()
        log("info", "Ctrl+C received, shutting down...")
        return 0
    finally:
        terminate(proc)


if __name__ == "__main__":
    raise SystemExit(main())
