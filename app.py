"""Production entry point for the user directory using uvicorn"""

import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    PORT = int(os.getenv("PORT", "8001"))
    HOST = os.getenv("HOST", "127.0.0.1")
    ENVIRONMENT = os.getenv("USERDIR_ENVIRONMENT", "production").lower()

    print(f"Starting user directory in {ENVIRONMENT} mode...")
    print(f"Host: {HOST}, Port: {PORT}")

    # One worker: the store lives in process memory
    uvicorn.run(
        "web.main:build_default_app",
        factory=True,
        host=HOST,
        port=PORT,
        workers=1,
        log_level="info",
        access_log=True,
    )
