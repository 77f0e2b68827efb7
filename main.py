import uvicorn

from tablebook.init_db import init_database

if __name__ == "__main__":
    print("🚀 Starting table booking service...")

    # Demo restaurant on first run
    init_database()

    # Start the server
    uvicorn.run(
        "tablebook.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
