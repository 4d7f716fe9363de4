"""Dashboard Entry Point - Root Module.

Run with `python main.py` or point uvicorn at `main:create_default_app`
with `--factory`.
"""

from quake_dashboard.main import build_app as create_default_app, main

__all__ = [
    "create_default_app",
    "main",
]


if __name__ == "__main__":
    main()
