import os

import uvicorn


def main() -> None:
    """Run the iplocate FastAPI application with uvicorn."""
    uvicorn.run(
        "iplocate.main:app",
        host=os.getenv("IPLOCATE_HOST", "127.0.0.1"),
        port=int(os.getenv("IPLOCATE_PORT", "8000")),
        reload=os.getenv("IPLOCATE_RELOAD", "1") == "1",
    )


if __name__ == "__main__":
    main()
