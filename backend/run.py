#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Uses the settings from backend/.env (or the environment) and reloads on change.
"""
import os
from pathlib import Path

import uvicorn

# uvicorn imports the app relative to the working directory
os.chdir(Path(__file__).parent)

if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    print(f"Starting chatline backend at http://{host}:{port}")
    print(f"API Docs: http://localhost:{port}/docs")

    uvicorn.run("chatline.main:app", host=host, port=port, reload=True, log_level="info")
