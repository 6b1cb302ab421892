#!/usr/bin/env python3
"""Run script for sincewhen."""

import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    uvicorn.run(
        "sincewhen.api.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8888")),
        reload=os.getenv("DEBUG", "False").lower() == "true",
    )
